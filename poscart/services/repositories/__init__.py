"""
Repository Pattern for Database Operations

- ProductRepository: product catalog lookups, search, fresh stock snapshots
"""
from typing import Optional

from poscart.cache import TTLCache
from poscart.db import get_supabase
from .product_repo import ProductRepository


async def get_product_repository(cache: Optional[TTLCache] = None) -> ProductRepository:
    """Build a ProductRepository on the shared async Supabase client."""
    return ProductRepository(await get_supabase(), cache=cache)


__all__ = [
    "ProductRepository",
    "get_product_repository",
]
