"""Cart package: models, storage, engine and provider."""
from .models import CartLine, CartSummary, CartResult, StockConflict
from .notifications import NotificationKind, Notifier, log_notifier
from .storage import CartStore, KeyValueStore, MemoryStore, FileStore, RedisStore, build_store
from .service import CartEngine
from .provider import CartProvider, use_cart

__all__ = [
    "CartLine",
    "CartSummary",
    "CartResult",
    "StockConflict",
    "NotificationKind",
    "Notifier",
    "log_notifier",
    "CartStore",
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "build_store",
    "CartEngine",
    "CartProvider",
    "use_cart",
]
