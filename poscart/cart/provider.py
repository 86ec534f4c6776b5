"""
Session-scoped access to a single CartEngine.

    with CartProvider(store=CartStore(MemoryStore())) as provider:
        ...
        use_cart().add_item(product)   # anywhere below, without passing the cart around

The provider is bound through a ContextVar, so independent scopes (tests,
concurrent request handlers) each see their own cart.
"""
from contextvars import ContextVar, Token
from decimal import Decimal
from typing import Callable, List, Optional

from poscart.config import get_settings
from poscart.errors import ContextMissingError, ERROR_CONTEXT_MISSING
from poscart.logging import get_logger
from poscart.services.models import Product
from poscart.services.repositories import ProductRepository
from .models import CartLine, CartResult, CartSummary, StockConflict
from .notifications import Notifier, log_notifier
from .service import CartEngine
from .storage import CartStore, build_store

logger = get_logger(__name__)

Subscriber = Callable[[List[CartLine], CartSummary], None]

_current_provider: ContextVar[Optional["CartProvider"]] = ContextVar(
    "poscart_cart_provider", default=None
)


class CartProvider:
    """Owns one CartEngine and forwards mutations to it, notifying subscribers."""

    def __init__(
        self,
        store: Optional[CartStore] = None,
        notify: Notifier = log_notifier,
        tax_rate: Optional[Decimal] = None,
    ):
        self._store = store
        self._notify = notify
        self._tax_rate = tax_rate
        self._engine: Optional[CartEngine] = None
        self._subscribers: List[Subscriber] = []
        self._tokens: List[Token] = []

    def __enter__(self) -> "CartProvider":
        self._tokens.append(_current_provider.set(self))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        _current_provider.reset(self._tokens.pop())

    @property
    def engine(self) -> CartEngine:
        """The engine, rehydrated from storage on first access."""
        if self._engine is None:
            store = self._store or CartStore(build_store(get_settings()))
            self._engine = CartEngine(store, notify=self._notify, tax_rate=self._tax_rate)
        return self._engine

    @property
    def lines(self) -> List[CartLine]:
        return self.engine.lines

    @property
    def summary(self) -> CartSummary:
        return self.engine.summary

    @property
    def tax_rate(self) -> Decimal:
        return self.engine.tax_rate

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(lines, summary)` after every change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        lines, summary = self.engine.lines, self.engine.summary
        for callback in list(self._subscribers):
            callback(lines, summary)

    def _forward(self, result: CartResult) -> CartResult:
        if result.ok:
            self._publish()
        return result

    def add_item(self, product: Product, quantity: int = 1) -> CartResult:
        return self._forward(self.engine.add_item(product, quantity))

    def update_item_quantity(self, product_id: str, new_quantity: int) -> CartResult:
        return self._forward(self.engine.update_item_quantity(product_id, new_quantity))

    def remove_item(self, product_id: str) -> CartResult:
        return self._forward(self.engine.remove_item(product_id))

    def clear_cart(self) -> CartResult:
        return self._forward(self.engine.clear_cart())

    def set_tax_rate(self, rate) -> CartResult:
        return self._forward(self.engine.set_tax_rate(rate))

    async def refresh_stock(self, repository: ProductRepository) -> List[StockConflict]:
        """
        Re-read every product in the cart from the catalog and revalidate.

        Meant to be awaited right before checkout; lines whose product no
        longer exists are reported as unavailable.
        """
        product_ids = [line.product_id for line in self.engine.lines]
        if not product_ids:
            return []

        products = await repository.get_many(product_ids)
        conflicts = self.engine.revalidate(products, require_all=True)
        self._publish()
        return conflicts


def use_cart() -> CartProvider:
    """
    Get the provider bound to the current context.

    Raises:
        ContextMissingError: If called outside a `with CartProvider(...)` block
    """
    provider = _current_provider.get()
    if provider is None:
        raise ContextMissingError(ERROR_CONTEXT_MISSING)
    return provider
