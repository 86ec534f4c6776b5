"""
Runtime configuration for poscart, read from environment variables.

Usage:
    from poscart.config import get_settings
    settings = get_settings()
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import cache

from dotenv import load_dotenv

from poscart.services.money import to_decimal

STORAGE_BACKENDS = ("memory", "file", "redis")


@dataclass(frozen=True)
class Settings:
    """Cart configuration."""
    tax_rate: Decimal = Decimal("0")
    storage_backend: str = "file"
    storage_path: str = os.path.join(".poscart", "cart.json")
    session_id: str = "default"
    upstash_redis_rest_url: str = ""
    upstash_redis_rest_token: str = ""
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.environ.get("CART_STORAGE_BACKEND", "file").strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"CART_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
            )

        tax_rate = to_decimal(os.environ.get("CART_TAX_RATE", "0"))
        if tax_rate < 0:
            raise ValueError("CART_TAX_RATE cannot be negative")

        return cls(
            tax_rate=tax_rate,
            storage_backend=backend,
            storage_path=os.environ.get("CART_STORAGE_PATH", cls.storage_path),
            session_id=os.environ.get("CART_SESSION_ID", "default"),
            upstash_redis_rest_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            upstash_redis_rest_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            supabase_url=os.environ.get("SUPABASE_URL", ""),
            supabase_service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY", ""),
        )


@cache
def get_settings() -> Settings:
    """Get settings singleton (environment and .env are read once)."""
    load_dotenv()
    return Settings.from_env()
