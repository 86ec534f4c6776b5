"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from poscart.errors import CartErrorCode
from poscart.services.models import Product
from poscart.services.money import round_money, multiply, add, to_float


@dataclass(frozen=True)
class CartLine:
    """One product and its quantity in the cart."""
    product: Product
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.product.price, self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "product": self.product.model_dump(mode="json"),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """
        Create from dictionary.

        Raises:
            KeyError, TypeError, ValueError: If data does not have the stored shape
        """
        quantity = data["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValueError(f"invalid stored quantity: {quantity!r}")
        return cls(product=Product.model_validate(data["product"]), quantity=quantity)


@dataclass(frozen=True)
class CartSummary:
    """Aggregates derived from the current lines. Never persisted."""
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    item_count: int = 0
    unique_item_count: int = 0

    @classmethod
    def from_lines(cls, lines: List[CartLine], tax_rate: Decimal) -> "CartSummary":
        subtotal = sum((line.line_total for line in lines), Decimal("0"))
        tax = round_money(multiply(subtotal, tax_rate)) if subtotal else Decimal("0")
        return cls(
            subtotal=subtotal,
            tax=tax,
            total=add(subtotal, tax),
            item_count=sum(line.quantity for line in lines),
            unique_item_count=len(lines),
        )

    def to_dict(self) -> dict:
        return {
            "subtotal": to_float(self.subtotal),
            "tax": to_float(self.tax),
            "total": to_float(self.total),
            "item_count": self.item_count,
            "unique_item_count": self.unique_item_count,
        }


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation. Failures leave the cart unchanged."""
    ok: bool
    message: str = ""
    error: Optional[CartErrorCode] = None

    @classmethod
    def success(cls, message: str = "") -> "CartResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: CartErrorCode, message: str) -> "CartResult":
        return cls(ok=False, message=message, error=error)


@dataclass(frozen=True)
class StockConflict:
    """A cart line that no longer fits the live catalog."""
    product_id: str
    product_name: str
    requested: int
    available: int
    reason: CartErrorCode
    message: str = field(default="", compare=False)
