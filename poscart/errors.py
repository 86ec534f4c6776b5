"""
Cart error codes and user-facing messages.

Messages are kept in one place so the engine, the notification sink and
the tests agree on the exact wording.
"""

from enum import Enum


class CartErrorCode(str, Enum):
    """Expected, recoverable rejections reported by the cart engine."""
    INVALID_QUANTITY = "InvalidQuantity"
    PRODUCT_UNAVAILABLE = "ProductUnavailable"
    OUT_OF_STOCK = "OutOfStock"
    INSUFFICIENT_STOCK = "InsufficientStock"
    PRODUCT_NOT_IN_CART = "ProductNotInCart"
    STORAGE_UNAVAILABLE = "StorageUnavailable"
    INVALID_TAX_RATE = "InvalidTaxRate"


class ContextMissingError(RuntimeError):
    """Raised when the cart is used outside of a CartProvider scope."""


# Quantity errors
ERROR_QUANTITY_NOT_POSITIVE = "Quantity must be greater than zero"

# Product errors
ERROR_PRODUCT_UNAVAILABLE = "{name} is not available for purchase"
ERROR_PRODUCT_OUT_OF_STOCK = "{name} is out of stock"
ERROR_PRODUCT_NOT_IN_CART = "Product not found in cart"

# Stock errors
ERROR_CANNOT_ADD_MORE = "Cannot add {quantity} more. Only {available} available."
ERROR_CANNOT_SET_QUANTITY = "Cannot set quantity to {quantity}. Only {available} available."

# Settings errors
ERROR_NEGATIVE_TAX_RATE = "Tax rate cannot be negative"

# Context errors
ERROR_CONTEXT_MISSING = "use_cart() must be called within a CartProvider"

# Informational messages
MESSAGE_ITEM_ADDED = "Added {quantity} {name} to cart"
MESSAGE_ITEM_REMOVED = "Item removed from cart"
MESSAGE_CART_CLEARED = "Cart cleared"
