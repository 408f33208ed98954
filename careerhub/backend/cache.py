"""
Application cache with two tiers.

Level 1: in-memory (fastest, lost on restart)
Level 2: JSON files on disk (persists across restarts)
"""

import hashlib
import re
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from careerhub.utils.file_utils import load_json_or_discard, save_json
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_TTL = 300
MEMORY_CACHE_MAX_SIZE = 100


class AppCache:
    """Tiered TTL cache for fetched rows and function results."""

    prefix = "app_cache_"

    def __init__(
        self,
        cache_dir: Union[Path, str, None] = None,
        default_ttl: int = DEFAULT_TTL,
        max_size: int = MEMORY_CACHE_MAX_SIZE,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._memory: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._lock = threading.Lock()

        if self.cache_dir:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings) -> "AppCache":
        return cls(
            cache_dir=settings.cache_dir if settings.cache.use_disk else None,
            default_ttl=settings.cache.default_ttl_seconds,
            max_size=settings.cache.memory_max_size,
        )

    def _disk_path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{self.prefix}{digest}.json"

    def get(self, key: str, use_disk: bool = True) -> Optional[Any]:
        """Get cached data, falling through memory then disk."""
        now = time.time()

        with self._lock:
            entry = self._memory.get(key)
            if entry and entry["expires_at"] > now:
                return entry["data"]

        if use_disk and self.cache_dir:
            path = self._disk_path(key)
            entry = load_json_or_discard(path)
            if isinstance(entry, dict):
                if entry.get("expires_at", 0) > now:
                    # Promote to memory cache
                    self._set_memory(key, entry["data"], entry["expires_at"] - now)
                    return entry["data"]
                path.unlink(missing_ok=True)

        return None

    def set(self, key: str, data: Any, ttl_seconds: Optional[int] = None, use_disk: bool = True) -> None:
        """Set cached data in memory and (optionally) on disk."""
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        self._set_memory(key, data, ttl)
        if use_disk and self.cache_dir:
            self._set_disk(key, data, ttl)

    def _set_memory(self, key: str, data: Any, ttl: float) -> None:
        now = time.time()
        with self._lock:
            if key in self._memory:
                del self._memory[key]
            elif len(self._memory) >= self.max_size:
                # Evict the oldest entry
                self._memory.popitem(last=False)
            self._memory[key] = {"data": data, "expires_at": now + ttl, "created_at": now}

    def _set_disk(self, key: str, data: Any, ttl: float) -> None:
        now = time.time()
        entry = {"key": key, "data": data, "expires_at": now + ttl, "created_at": now}
        try:
            save_json(entry, self._disk_path(key), indent=None)
        except OSError as e:
            self.cleanup_disk()
            logger.warning(f"Cache disk write error for {key}: {e}")

    def invalidate(self, pattern: str) -> int:
        """
        Invalidate cache entries whose key matches ``pattern``.

        ``*`` is a wildcard; everything else is matched literally.

        Returns:
            Number of entries removed across both tiers
        """
        regex = re.compile(".*".join(re.escape(part) for part in pattern.split("*")))
        removed = 0

        with self._lock:
            for key in [k for k in self._memory if regex.search(k)]:
                del self._memory[key]
                removed += 1

        if self.cache_dir:
            for path in self.cache_dir.glob(f"{self.prefix}*.json"):
                entry = load_json_or_discard(path)
                if isinstance(entry, dict) and regex.search(entry.get("key", "")):
                    path.unlink(missing_ok=True)
                    removed += 1

        logger.debug(f"Invalidated {removed} cache entries matching {pattern!r}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._memory.clear()
        self.cleanup_disk(remove_all=True)

    def cleanup_expired(self) -> None:
        now = time.time()
        with self._lock:
            for key in [k for k, v in self._memory.items() if v["expires_at"] <= now]:
                del self._memory[key]

    def cleanup_disk(self, remove_all: bool = False) -> None:
        if not self.cache_dir:
            return
        now = time.time()
        for path in self.cache_dir.glob(f"{self.prefix}*.json"):
            if remove_all:
                path.unlink(missing_ok=True)
                continue
            entry = load_json_or_discard(path)
            if isinstance(entry, dict) and entry.get("expires_at", 0) <= now:
                path.unlink(missing_ok=True)

    def get_stats(self) -> Dict[str, int]:
        disk_count = len(list(self.cache_dir.glob(f"{self.prefix}*.json"))) if self.cache_dir else 0
        with self._lock:
            return {"memory": len(self._memory), "disk": disk_count}

    def with_cache(
        self,
        key: str,
        fetcher: Callable[[], Any],
        ttl_seconds: Optional[int] = None,
        use_disk: bool = True,
    ) -> Any:
        """Return the cached value for ``key`` or compute, store and return it."""
        cached = self.get(key, use_disk=use_disk)
        if cached is not None:
            return cached

        data = fetcher()
        self.set(key, data, ttl_seconds=ttl_seconds, use_disk=use_disk)
        return data
