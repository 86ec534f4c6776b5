"""Cart engine: stock-aware line items persisted through a CartStore."""
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional

from poscart.config import get_settings
from poscart.errors import (
    CartErrorCode,
    ERROR_CANNOT_ADD_MORE,
    ERROR_CANNOT_SET_QUANTITY,
    ERROR_NEGATIVE_TAX_RATE,
    ERROR_PRODUCT_NOT_IN_CART,
    ERROR_PRODUCT_OUT_OF_STOCK,
    ERROR_PRODUCT_UNAVAILABLE,
    ERROR_QUANTITY_NOT_POSITIVE,
    MESSAGE_CART_CLEARED,
    MESSAGE_ITEM_ADDED,
    MESSAGE_ITEM_REMOVED,
)
from poscart.logging import (
    describe_lines,
    get_logger,
    sanitize_id_for_logging,
    sanitize_string_for_logging,
)
from poscart.services.models import Product
from poscart.services.money import to_decimal, to_float
from .models import CartLine, CartResult, CartSummary, StockConflict
from .notifications import NotificationKind, Notifier, log_notifier
from .storage import CartStore

logger = get_logger(__name__)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class CartEngine:
    """
    Single source of truth for the active cart.

    Business-rule violations never raise: they are returned as a failed
    CartResult, reported to the notification sink, and leave the lines
    untouched. Every successful mutation is persisted before returning.

    Usage:
        engine = CartEngine(CartStore(MemoryStore()))
        result = engine.add_item(product, 2)
        if not result.ok:
            print(result.error, result.message)
    """

    def __init__(
        self,
        store: CartStore,
        notify: Notifier = log_notifier,
        tax_rate: Optional[Decimal] = None,
    ):
        self._store = store
        self._notify = notify
        self._lines: List[CartLine] = store.load()

        stored_rate = store.load_tax_rate()
        if stored_rate is not None:
            self._tax_rate = stored_rate
        else:
            rate = get_settings().tax_rate if tax_rate is None else to_decimal(tax_rate)
            if rate < 0:
                raise ValueError(ERROR_NEGATIVE_TAX_RATE)
            self._tax_rate = rate

        logger.debug(f"Cart loaded ({describe_lines(self._lines)}, tax rate {self._tax_rate})")

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def tax_rate(self) -> Decimal:
        return self._tax_rate

    @property
    def summary(self) -> CartSummary:
        return CartSummary.from_lines(self._lines, self._tax_rate)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.product_id == product_id), None)

    def _commit(self, lines: List[CartLine]) -> None:
        self._lines = lines
        self._store.save(lines)

    def _reject(self, error: CartErrorCode, message: str) -> CartResult:
        self._notify(NotificationKind.ERROR, message)
        return CartResult.failure(error, message)

    def add_item(self, product: Product, quantity: int = 1) -> CartResult:
        """
        Add `quantity` units of `product`, merging into an existing line.

        Checks, in order: quantity >= 1, product active, product in stock,
        existing + requested quantity within stock.
        """
        if not _is_positive_int(quantity):
            return self._reject(CartErrorCode.INVALID_QUANTITY, ERROR_QUANTITY_NOT_POSITIVE)

        if not product.is_active:
            return self._reject(
                CartErrorCode.PRODUCT_UNAVAILABLE,
                ERROR_PRODUCT_UNAVAILABLE.format(name=product.name),
            )

        if product.stock_quantity <= 0:
            return self._reject(
                CartErrorCode.OUT_OF_STOCK,
                ERROR_PRODUCT_OUT_OF_STOCK.format(name=product.name),
            )

        existing = self.get_line(product.id)
        current_quantity = existing.quantity if existing else 0

        if current_quantity + quantity > product.stock_quantity:
            return self._reject(
                CartErrorCode.INSUFFICIENT_STOCK,
                ERROR_CANNOT_ADD_MORE.format(
                    quantity=quantity,
                    available=product.stock_quantity - current_quantity,
                ),
            )

        if existing:
            # The fresher snapshot replaces the one held in the line
            lines = [
                replace(line, product=product, quantity=current_quantity + quantity)
                if line.product_id == product.id else line
                for line in self._lines
            ]
        else:
            lines = [*self._lines, CartLine(product=product, quantity=quantity)]

        self._commit(lines)
        logger.debug(
            f"Added {quantity} x {sanitize_string_for_logging(product.name)} "
            f"[{sanitize_id_for_logging(product.id)}] "
            f"(line quantity {current_quantity + quantity})"
        )

        message = MESSAGE_ITEM_ADDED.format(quantity=quantity, name=product.name)
        self._notify(NotificationKind.SUCCESS, message)
        return CartResult.success(message)

    def update_item_quantity(self, product_id: str, new_quantity: int) -> CartResult:
        """Set a line's quantity (absolute, not a delta)."""
        if not _is_positive_int(new_quantity):
            return self._reject(CartErrorCode.INVALID_QUANTITY, ERROR_QUANTITY_NOT_POSITIVE)

        line = self.get_line(product_id)
        if line is None:
            return self._reject(CartErrorCode.PRODUCT_NOT_IN_CART, ERROR_PRODUCT_NOT_IN_CART)

        if new_quantity > line.product.stock_quantity:
            return self._reject(
                CartErrorCode.INSUFFICIENT_STOCK,
                ERROR_CANNOT_SET_QUANTITY.format(
                    quantity=new_quantity,
                    available=line.product.stock_quantity,
                ),
            )

        self._commit([
            replace(item, quantity=new_quantity) if item.product_id == product_id else item
            for item in self._lines
        ])
        logger.debug(f"Set {sanitize_id_for_logging(product_id)} quantity to {new_quantity}")
        return CartResult.success()

    def remove_item(self, product_id: str) -> CartResult:
        """Remove the line for `product_id`. Removing an absent product is a no-op."""
        self._commit([line for line in self._lines if line.product_id != product_id])
        logger.debug(f"Removed {sanitize_id_for_logging(product_id)} ({describe_lines(self._lines)} left)")
        self._notify(NotificationKind.INFO, MESSAGE_ITEM_REMOVED)
        return CartResult.success(MESSAGE_ITEM_REMOVED)

    def clear_cart(self) -> CartResult:
        self._commit([])
        logger.debug("Cart cleared")
        self._notify(NotificationKind.INFO, MESSAGE_CART_CLEARED)
        return CartResult.success(MESSAGE_CART_CLEARED)

    def set_tax_rate(self, rate) -> CartResult:
        """Change the tax rate (fraction, e.g. 0.07) and persist it."""
        if isinstance(rate, bool) or not isinstance(rate, (int, float, Decimal)):
            return self._reject(CartErrorCode.INVALID_TAX_RATE, ERROR_NEGATIVE_TAX_RATE)

        value = to_decimal(rate)
        if not value.is_finite() or value < 0:
            return self._reject(CartErrorCode.INVALID_TAX_RATE, ERROR_NEGATIVE_TAX_RATE)

        self._tax_rate = value
        self._store.save_tax_rate(value)
        return CartResult.success()

    def revalidate(self, products: Iterable[Product], require_all: bool = False) -> List[StockConflict]:
        """
        Refresh line snapshots from live catalog data and report conflicts.

        Quantities are never changed here; the caller decides how to resolve
        each conflict (typically with update_item_quantity or remove_item).

        Args:
            products: Fresh product snapshots
            require_all: Treat lines whose product is missing from `products`
                as unavailable (the product was deleted from the catalog)

        Returns:
            One StockConflict per line that can no longer be sold as is
        """
        fresh = {product.id: product for product in products}
        conflicts: List[StockConflict] = []
        lines: List[CartLine] = []

        for line in self._lines:
            product = fresh.get(line.product_id)
            if product is None:
                lines.append(line)
                if require_all:
                    conflicts.append(StockConflict(
                        product_id=line.product_id,
                        product_name=line.product.name,
                        requested=line.quantity,
                        available=0,
                        reason=CartErrorCode.PRODUCT_UNAVAILABLE,
                        message=ERROR_PRODUCT_UNAVAILABLE.format(name=line.product.name),
                    ))
                continue

            lines.append(replace(line, product=product))

            if not product.is_active:
                reason = CartErrorCode.PRODUCT_UNAVAILABLE
                message = ERROR_PRODUCT_UNAVAILABLE.format(name=product.name)
            elif product.stock_quantity <= 0:
                reason = CartErrorCode.OUT_OF_STOCK
                message = ERROR_PRODUCT_OUT_OF_STOCK.format(name=product.name)
            elif line.quantity > product.stock_quantity:
                reason = CartErrorCode.INSUFFICIENT_STOCK
                message = ERROR_CANNOT_SET_QUANTITY.format(
                    quantity=line.quantity, available=product.stock_quantity
                )
            else:
                continue

            conflicts.append(StockConflict(
                product_id=product.id,
                product_name=product.name,
                requested=line.quantity,
                available=max(product.stock_quantity, 0) if product.is_active else 0,
                reason=reason,
                message=message,
            ))

        self._commit(lines)
        for conflict in conflicts:
            self._notify(NotificationKind.ERROR, conflict.message)
        if conflicts:
            names = ", ".join(sanitize_string_for_logging(c.product_name, 30) for c in conflicts)
            logger.info(f"Revalidation found {len(conflicts)} stock conflicts: {names}")
        return conflicts

    def to_dict(self) -> dict:
        """Cart contents and summary with floats, for API responses."""
        summary = self.summary
        return {
            "is_empty": self.is_empty,
            "items": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product.name,
                    "quantity": line.quantity,
                    "unit_price": to_float(line.unit_price),
                    "total": to_float(line.line_total),
                    "stock_quantity": line.product.stock_quantity,
                }
                for line in self._lines
            ],
            "tax_rate": to_float(self._tax_rate),
            **summary.to_dict(),
        }
