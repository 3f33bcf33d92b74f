"""Page service: resolve admin page definitions into a cached lookup table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from layadmin import VERSION
from layadmin.exceptions import ConfigParseError, ConfigValidationError, PageNotFoundError
from layadmin.filesystem.page_loader import parse_page_configs
from layadmin.schemas.page import BootstrapContext, PageDescriptor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from layadmin.config import Settings
    from layadmin.services.cache_service import CacheStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageConfigTable:
    """Every page descriptor keyed by relative file path, in scan order."""

    entries: dict[str, PageDescriptor]

    def by_uri(self) -> dict[str, PageDescriptor]:
        """Index descriptors by ``uri``.

        Duplicate URIs are not rejected: the entry scanned last wins.
        """
        return {descriptor.uri: descriptor for descriptor in self.entries.values()}

    def __len__(self) -> int:
        return len(self.entries)


class PageConfigResolver:
    """Scan, validate and cache admin page definitions; answer lookups by path.

    The table lives in the injected cache store under ``settings.cache_key``
    for ``settings.cache_ttl_seconds`` and is rebuilt wholesale on a miss.
    Any failure during a rebuild is raised to the caller; nothing partial is
    cached.
    """

    def __init__(self, settings: Settings, cache: CacheStore) -> None:
        self.settings = settings
        self.cache = cache

    @staticmethod
    def version() -> str:
        return VERSION

    @property
    def admin_prefix(self) -> str:
        return self.settings.web_route_prefix

    def is_admin_route(self, path: str) -> bool:
        """Check whether *path* is served by the admin panel."""
        return path.startswith(self.admin_prefix)

    def _build_table(self) -> dict[str, dict[str, Any]]:
        pages = parse_page_configs(
            self.settings.page_config_dir,
            prefix=self.admin_prefix,
            default_title=self.settings.title,
        )
        logger.info(
            "Page configuration rebuilt: %d pages from %s",
            len(pages),
            self.settings.page_config_dir,
        )
        return {key: descriptor.model_dump() for key, descriptor in pages.items()}

    def resolve_table(self) -> PageConfigTable:
        """Return the page table, rebuilding it on a cache miss.

        Raises ConfigParseError or ConfigValidationError when a page file is
        broken.  Cache backend failures are re-raised as
        ConfigValidationError.
        """
        try:
            raw = self.cache.remember(
                self.settings.cache_key,
                self.settings.cache_ttl_seconds,
                self._build_table,
            )
            entries = {key: PageDescriptor.model_validate(value) for key, value in raw.items()}
        except (ConfigParseError, ConfigValidationError):
            raise
        except Exception as exc:
            logger.error("Page configuration cache failure: %s", exc)
            raise ConfigValidationError(None, str(exc) or type(exc).__name__) from exc
        return PageConfigTable(entries=entries)

    def lookup(self, request_path: str) -> PageDescriptor | None:
        """Find the page definition for *request_path*.

        Returns None for paths outside the admin prefix without touching the
        cache.  Raises PageNotFoundError for admin paths nobody declared.
        """
        if not self.is_admin_route(request_path):
            return None

        pages = self.resolve_table().by_uri()
        descriptor = pages.get(request_path)
        if descriptor is None:
            raise PageNotFoundError(request_path)
        return descriptor

    def bootstrap_context(
        self, request_path: str, params: Mapping[str, Any] | None = None
    ) -> BootstrapContext:
        """Assemble the payload handed to admin views."""
        return BootstrapContext(
            version=self.version(),
            params=dict(params) if params else {},
            page=self.lookup(request_path),
        )

    def flush(self) -> None:
        """Drop the cached table so the next lookup rescans the directory."""
        self.cache.forget(self.settings.cache_key)
        logger.info("Page configuration cache cleared (%s)", self.settings.cache_key)
