"""Shared test fixtures for LayAdmin."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from layadmin.config import Settings
from layadmin.main import create_app
from layadmin.services.cache_service import InMemoryCacheStore
from layadmin.services.page_service import PageConfigResolver

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path


def write_page(root: Path, rel_path: str, data: dict[str, Any] | str) -> Path:
    """Write a page definition file under *root*, creating parent directories."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    content = data if isinstance(data, str) else json.dumps(data)
    path.write_text(content, encoding="utf-8")
    return path


@asynccontextmanager
async def create_test_client(settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client for an app built from *settings*.

    ASGITransport does not run the lifespan; the resolver loads lazily on the
    first request instead.
    """
    app = create_app(settings)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def page_config_dir(tmp_path: Path) -> Path:
    """Create a page configuration directory with two valid pages."""
    root = tmp_path / "config"
    root.mkdir()
    write_page(
        root,
        "dashboard.json",
        {"uri": "dashboard", "title": "Dashboard", "view": "layadmin/pages/dashboard.html"},
    )
    write_page(
        root,
        "system/users.json",
        {
            "uri": "system/users",
            "scripts": ["/js/users.js"],
            "table": {"url": "/api/admin/users"},
        },
    )
    return root


@pytest.fixture
def test_settings(page_config_dir: Path, tmp_path: Path) -> Settings:
    """Create test settings with temporary paths."""
    return Settings(
        _env_file=None,
        debug=True,
        title="Test Admin",
        page_config_dir=page_config_dir,
        cache_dir=tmp_path / "cache",
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def resolver(test_settings: Settings, cache_store: InMemoryCacheStore) -> PageConfigResolver:
    """Create a page resolver backed by a fresh in-memory cache."""
    return PageConfigResolver(test_settings, cache_store)


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    async with create_test_client(test_settings) as ac:
        yield ac
