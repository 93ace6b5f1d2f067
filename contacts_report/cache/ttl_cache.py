"""
TTL Cache Module

Caches JSON-serialisable values in the property store with an absolute expiry.
Each record is stored as ``{"value": ..., "expires": ms, "created": ms}``.
"""

import json
import time
from typing import Any, Callable, Dict, Optional

from contacts_report.cache.property_store import PropertyStore
from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

# Default time to live in seconds (1 hour)
DEFAULT_TTL = 60 * 60


class Cache:
    """
    Expiring cache on top of a PropertyStore.

    Store errors are logged and treated as a miss so a broken cache never
    aborts a report run.
    """

    def __init__(
        self,
        store: PropertyStore,
        default_ttl: int = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.default_ttl = default_ttl
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Args:
            key (str): Cache key.

        Returns:
            Optional[Any]: The cached value, or None if missing or expired.
            Expired entries are removed.
        """
        try:
            cached = self.store.get_property(key)
            if not cached:
                return None

            record = json.loads(cached)
            if self._now_ms() > record["expires"]:
                self.delete(key)
                return None

            return record["value"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Cache get error for key {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a value.

        Args:
            key (str): Cache key.
            value (Any): JSON-serialisable value.
            ttl (int, optional): Time to live in seconds. Defaults to default_ttl.
        """
        ttl = self.default_ttl if ttl is None else ttl
        now = self._now_ms()
        record = {
            "value": value,
            "expires": now + ttl * 1000,
            "created": now,
        }
        try:
            self.store.set_property(key, json.dumps(record))
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Cache set error for key {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self.store.delete_property(key)
        except (OSError, ValueError) as e:
            logger.warning(f"Cache delete error for key {key}: {e}")

    def delete_prefix(self, prefix: str) -> int:
        """
        Delete every entry whose key starts with prefix.

        Returns:
            int: Number of entries removed.
        """
        try:
            keys = [key for key in self.store.get_properties() if key.startswith(prefix)]
            for key in keys:
                self.store.delete_property(key)
        except (OSError, ValueError) as e:
            logger.warning(f"Cache delete error for prefix {prefix}: {e}")
            return 0

        if keys:
            logger.debug(f"Deleted {len(keys)} cache entries with prefix {prefix}")
        return len(keys)

    def clear(self) -> None:
        try:
            self.store.delete_all_properties()
            logger.info("Cache cleared")
        except OSError as e:
            logger.warning(f"Cache clear error: {e}")

    def get_stats(self) -> Dict[str, int]:
        """
        Count valid and expired entries.

        Returns:
            Dict[str, int]: total_entries, valid_entries and expired_entries.
            Entries that are not cache records count only toward the total.
        """
        try:
            properties = self.store.get_properties()
        except (OSError, ValueError) as e:
            logger.warning(f"Cache stats error: {e}")
            return {"total_entries": 0, "valid_entries": 0, "expired_entries": 0}

        now = self._now_ms()
        valid = 0
        expired = 0
        for raw in properties.values():
            try:
                record = json.loads(raw)
                if now > record["expires"]:
                    expired += 1
                else:
                    valid += 1
            except (ValueError, KeyError, TypeError):
                continue

        return {
            "total_entries": len(properties),
            "valid_entries": valid,
            "expired_entries": expired,
        }
