"""
Database Module - Supabase and Redis Clients

Provides singleton instances of:
- Async Supabase client for the product catalog
- Upstash Redis client for persisted carts
"""

from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client
from upstash_redis import Redis

from poscart.config import get_settings


# Singleton instances
_async_supabase_client: Optional[AsyncClient] = None
_redis_client: Optional[Redis] = None


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (singleton).

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing
    """
    global _async_supabase_client

    if _async_supabase_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        _async_supabase_client = await acreate_client(
            settings.supabase_url, settings.supabase_service_role_key
        )

    return _async_supabase_client


def get_redis() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    The cart engine is synchronous, so the blocking client is used.

    Raises:
        ValueError: If UPSTASH_REDIS_REST_URL or UPSTASH_REDIS_REST_TOKEN is missing
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        if not settings.upstash_redis_rest_url or not settings.upstash_redis_rest_token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(
            url=settings.upstash_redis_rest_url,
            token=settings.upstash_redis_rest_token,
        )

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    SESSION = "poscart:"  # poscart:{session_id}:{key}

    @staticmethod
    def session_key(session_id: str, key: str) -> str:
        return f"{RedisKeys.SESSION}{session_id}:{key}"


class TTL:
    """Time-to-live constants for Redis keys (seconds)."""

    CART = 86400  # 24 hours
