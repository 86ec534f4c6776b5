"""Product Repository - Product catalog operations.

All methods use async/await with supabase-py v2.
"""
from typing import List, Optional

from poscart.cache import TTLCache
from poscart.services.models import Product
from .base import BaseRepository

# Lookups for browsing/scanning may be slightly stale; revalidation never is
PRODUCT_CACHE_TTL = 30


class ProductRepository(BaseRepository):
    """Product database operations."""

    def __init__(self, client, cache: Optional[TTLCache] = None, cache_ttl: float = PRODUCT_CACHE_TTL) -> None:
        super().__init__(client)
        self.cache = cache
        self.cache_ttl = cache_ttl

    @staticmethod
    def _cache_key(product_id: str) -> str:
        return f"product:{product_id}"

    async def _fetch_by_id(self, product_id: str) -> Optional[Product]:
        result = await self.client.table("products").select("*").eq("id", product_id).limit(1).execute()
        return Product(**result.data[0]) if result.data else None

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID, served from the cache when one is configured."""
        if self.cache is None:
            return await self._fetch_by_id(product_id)
        return await self.cache.get_or_set(
            self._cache_key(product_id),
            lambda: self._fetch_by_id(product_id),
            self.cache_ttl,
        )

    async def get_many(self, product_ids: List[str]) -> List[Product]:
        """
        Get current snapshots for several products, bypassing the cache.

        IDs with no matching row are simply absent from the result.
        """
        if not product_ids:
            return []

        result = await self.client.table("products").select("*").in_("id", list(product_ids)).execute()
        products = [Product(**row) for row in result.data or []]

        if self.cache is not None:
            for product in products:
                self.cache.set(self._cache_key(product.id), product, self.cache_ttl)
        return products

    async def search(self, query: str, limit: int = 20) -> List[Product]:
        """Search active products by name or SKU."""
        query = query.strip()
        if not query:
            return []

        result = await self.client.table("products").select("*").or_(
            f"name.ilike.%{query}%,sku.ilike.%{query}%"
        ).eq("is_active", True).order("name").limit(limit).execute()

        return [Product(**row) for row in result.data or []]

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        """Exact SKU/barcode lookup."""
        result = await self.client.table("products").select("*").eq("sku", sku.strip()).limit(1).execute()
        return Product(**result.data[0]) if result.data else None

    def invalidate(self, product_ids: Optional[List[str]] = None) -> None:
        """Drop cached products; with no IDs the whole cache is cleared."""
        if self.cache is None:
            return
        if product_ids is None:
            self.cache.clear()
            return
        for product_id in product_ids:
            self.cache.delete(self._cache_key(product_id))
