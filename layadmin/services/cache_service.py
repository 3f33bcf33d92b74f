"""Key-value cache stores with TTL used to hold the page configuration table."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from layadmin.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for the cache backing the page configuration table."""

    def get(self, key: str) -> Any | None:
        """Return the live value for *key*, or None on miss or expiry."""
        ...

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store *value* for *ttl_seconds* (0 means no expiry)."""
        ...

    def forget(self, key: str) -> None:
        """Drop *key* if present."""
        ...

    def flush(self) -> None:
        """Drop every entry."""
        ...

    def remember(self, key: str, ttl_seconds: int, producer: Callable[[], T]) -> T:
        """Return the cached value, or run *producer* and cache its result."""
        ...


class BaseCacheStore(ABC):
    """Produce-or-fetch on top of ``get``/``put``.

    Not single-flight: concurrent misses each run the producer and the last
    ``put`` wins.  A producer that raises leaves the store untouched.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None: ...

    @abstractmethod
    def put(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    @abstractmethod
    def forget(self, key: str) -> None: ...

    @abstractmethod
    def flush(self) -> None: ...

    def remember(self, key: str, ttl_seconds: int, producer: Callable[[], T]) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]
        value = producer()
        self.put(key, value, ttl_seconds)
        return value


class InMemoryCacheStore(BaseCacheStore):
    """Process-local store with per-entry expiry. State is lost on restart.

    A ``ttl_seconds`` of 0 stores the entry without expiry.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Any, float | None]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds > 0 else None
        self._entries[key] = (value, expires_at)

    def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def flush(self) -> None:
        self._entries.clear()


class FileCacheStore(BaseCacheStore):
    """Store each entry as a JSON file under *directory*.

    Survives restarts and is shared by every worker process pointing at the
    same directory.  Values must be JSON-serializable.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> Any | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
            expires_at = entry["expires_at"]
            value = entry["value"]
            if expires_at is not None and not isinstance(expires_at, int | float):
                raise TypeError(f"expires_at must be a timestamp, got {expires_at!r}")
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable cache entry %s", path, exc_info=True)
            path.unlink(missing_ok=True)
            return None
        if expires_at is not None and time.time() >= expires_at:
            path.unlink(missing_ok=True)
            return None
        return value

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds > 0 else None
        payload = json.dumps({"expires_at": expires_at, "value": value})
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        # One temp file per writer; concurrent rebuilds each replace the entry whole
        fd, tmp_name = tempfile.mkstemp(prefix=f"{path.stem}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    def forget(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def flush(self) -> None:
        if not self.directory.is_dir():
            return
        for path in self.directory.glob("*.json"):
            path.unlink(missing_ok=True)


class NullCacheStore(BaseCacheStore):
    """Store that never keeps anything; every lookup rebuilds."""

    def get(self, key: str) -> Any | None:
        return None

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        return None

    def forget(self, key: str) -> None:
        return None

    def flush(self) -> None:
        return None


_STORE_NAMES = ("memory", "file", "null")


def get_cache_store(settings: Settings) -> CacheStore:
    """Build the cache store selected by ``settings.cache_store``.

    ``default`` maps to the in-memory store.  Unknown names fall back to the
    in-memory store as well.
    """
    name = settings.cache_store
    if name == "default":
        name = "memory"
    elif name not in _STORE_NAMES:
        logger.warning("Unknown cache store %r, falling back to in-memory store", name)
        name = "memory"

    if name == "file":
        return FileCacheStore(settings.cache_dir)
    if name == "null":
        return NullCacheStore()
    return InMemoryCacheStore()
