"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock

# Set test environment variables before poscart reads its settings
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("CART_TAX_RATE", "0")
os.environ.setdefault("CART_SESSION_ID", "test-session")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_key")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")

from poscart.cart import CartEngine, CartStore, MemoryStore, NotificationKind  # noqa: E402
from poscart.services.models import Product  # noqa: E402


class RecordingNotifier:
    """Notification sink that keeps every (kind, message) pair."""

    def __init__(self):
        self.events = []

    def __call__(self, kind: NotificationKind, message: str) -> None:
        self.events.append((kind, message))

    @property
    def kinds(self):
        return [kind for kind, _ in self.events]

    @property
    def last(self):
        return self.events[-1] if self.events else None


@pytest.fixture
def sample_product():
    """Sample product row as returned by the catalog"""
    return {
        "id": "p1",
        "name": "Es Teh Manis",
        "description": "Iced sweet tea",
        "price": 10000,
        "sku": "ETM-001",
        "category": "drinks",
        "stock_quantity": 5,
        "is_active": True,
        "low_stock_threshold": 2,
        "created_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def make_product():
    """Factory for Product snapshots with sensible defaults"""
    def _make(product_id="p1", name=None, price=10000, stock_quantity=5, is_active=True, **extra):
        return Product(
            id=product_id,
            name=name or f"Product {product_id}",
            price=price,
            stock_quantity=stock_quantity,
            is_active=is_active,
            **extra,
        )
    return _make


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def cart_store(kv):
    return CartStore(kv)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(cart_store, notifier):
    return CartEngine(cart_store, notify=notifier)


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client; set `table_mock.execute.return_value.data` per test"""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.in_.return_value = table_mock
    table_mock.or_.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[]))

    client.table.return_value = table_mock
    return client
