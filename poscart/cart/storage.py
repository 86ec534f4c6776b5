"""
Cart persistence.

`CartStore` round-trips the cart lines (and the tax rate) through a small
string-keyed key-value store. Backends:
- MemoryStore: process-local dict
- FileStore: one JSON document on disk
- RedisStore: Upstash Redis, keys namespaced per session

Read and write failures never reach the caller: the in-memory cart stays
authoritative and the failure is logged.
"""
import json
import os
import tempfile
from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from upstash_redis import Redis

from poscart.config import Settings
from poscart.db import get_redis, RedisKeys, TTL
from poscart.errors import CartErrorCode
from poscart.logging import describe_lines, get_logger, sanitize_string_for_logging
from poscart.services.money import parse_decimal, to_decimal
from .models import CartLine

logger = get_logger(__name__)

CART_KEY = "cart"
TAX_RATE_KEY = "taxRate"


class KeyValueStore(Protocol):
    """Synchronous string-keyed store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store. Lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileStore:
    """
    All keys kept in a single JSON object on disk.

    Writes go to a temp file in the same directory and are moved into
    place, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, RecursionError) as e:
            # Unusable document; the next write replaces it
            logger.warning(f"Ignoring unreadable cart file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring cart file {self.path}: expected a JSON object")
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".cart-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class RedisStore:
    """Upstash Redis store. Every key expires after `ttl` seconds without writes."""

    def __init__(self, session_id: str, redis: Optional[Redis] = None, ttl: int = TTL.CART):
        self.session_id = session_id
        self.ttl = ttl
        self._redis = redis  # Lazy initialization

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    def _key(self, key: str) -> str:
        return RedisKeys.session_key(self.session_id, key)

    def get(self, key: str) -> Optional[str]:
        return self.redis.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.redis.set(self._key(key), value, ex=self.ttl)

    def delete(self, key: str) -> None:
        self.redis.delete(self._key(key))


def build_store(settings: Settings) -> KeyValueStore:
    """Create the backend selected by CART_STORAGE_BACKEND."""
    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "redis":
        return RedisStore(session_id=settings.session_id)
    return FileStore(settings.storage_path)


class CartStore:
    """Load/save contract between the cart engine and a KeyValueStore."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def load(self) -> List[CartLine]:
        """
        Read the persisted cart.

        Returns:
            Stored lines, or [] when nothing is stored, the backend fails,
            or the stored value is corrupt (the key is then cleared)
        """
        try:
            raw = self.kv.get(CART_KEY)
        except Exception as e:
            logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to read cart: {e}")
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list of lines, got {type(data).__name__}")
            lines = [CartLine.from_dict(item) for item in data]
            seen = set()
            for line in lines:
                if line.product_id in seen:
                    raise ValueError(f"duplicate line for product {line.product_id}")
                seen.add(line.product_id)
            return lines
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, RecursionError) as e:
            # Corrupted data - clear it and start empty
            logger.warning(f"Corrupted cart data discarded: {sanitize_string_for_logging(str(e), 200)}")
            self.clear()
            return []

    def save(self, lines: List[CartLine]) -> None:
        """Persist lines. Failures (quota, network, disk) are logged, not raised."""
        try:
            self.kv.set(CART_KEY, json.dumps([line.to_dict() for line in lines]))
            logger.debug(f"Cart saved ({describe_lines(lines)})")
        except Exception as e:
            logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to save cart: {e}")

    def clear(self) -> None:
        """Remove the stored cart."""
        try:
            self.kv.delete(CART_KEY)
        except Exception as e:
            logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to clear cart: {e}")

    def load_tax_rate(self) -> Optional[Decimal]:
        """Return the persisted tax rate, or None when absent or unusable."""
        try:
            raw = self.kv.get(TAX_RATE_KEY)
        except Exception as e:
            logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to read tax rate: {e}")
            return None

        if raw is None:
            return None

        try:
            rate = parse_decimal(raw)
        except ValueError:
            rate = None
        if rate is None or rate < 0:
            logger.warning(f"Discarding stored tax rate {sanitize_string_for_logging(raw)!r}")
            try:
                self.kv.delete(TAX_RATE_KEY)
            except Exception as e:
                logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to clear tax rate: {e}")
            return None
        return rate

    def save_tax_rate(self, rate: Decimal) -> None:
        try:
            self.kv.set(TAX_RATE_KEY, str(to_decimal(rate)))
        except Exception as e:
            logger.error(f"{CartErrorCode.STORAGE_UNAVAILABLE.value}: failed to save tax rate: {e}")
