"""Tests for cache stores and store selection."""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from layadmin.config import Settings
from layadmin.services.cache_service import (
    CacheStore,
    FileCacheStore,
    InMemoryCacheStore,
    NullCacheStore,
    get_cache_store,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestInMemoryCacheStore:
    def test_put_and_get(self) -> None:
        store = InMemoryCacheStore()
        store.put("k", {"a": 1}, 60)
        assert store.get("k") == {"a": 1}

    def test_expired_entry_is_a_miss(self) -> None:
        store = InMemoryCacheStore()
        with patch("layadmin.services.cache_service.time.monotonic", return_value=100.0):
            store.put("k", "v", 10)
        with patch("layadmin.services.cache_service.time.monotonic", return_value=110.0):
            assert store.get("k") is None

    def test_zero_ttl_never_expires(self) -> None:
        store = InMemoryCacheStore()
        with patch("layadmin.services.cache_service.time.monotonic", return_value=0.0):
            store.put("k", "v", 0)
        with patch("layadmin.services.cache_service.time.monotonic", return_value=1e9):
            assert store.get("k") == "v"

    def test_forget_and_flush(self) -> None:
        store = InMemoryCacheStore()
        store.put("a", 1, 60)
        store.put("b", 2, 60)
        store.forget("a")
        assert store.get("a") is None
        assert store.get("b") == 2
        store.flush()
        assert store.get("b") is None

    def test_remember_runs_producer_once(self) -> None:
        store = InMemoryCacheStore()
        calls: list[str] = []

        def produce() -> str:
            calls.append("x")
            return "value"

        assert store.remember("k", 60, produce) == "value"
        assert store.remember("k", 60, produce) == "value"
        assert calls == ["x"]

    def test_failing_producer_stores_nothing(self) -> None:
        store = InMemoryCacheStore()

        def produce() -> str:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            store.remember("k", 60, produce)
        assert store.get("k") is None


class TestFileCacheStore:
    def test_roundtrip_persists_across_instances(self, tmp_path: Path) -> None:
        FileCacheStore(tmp_path).put("k", {"pages": ["a"]}, 60)
        assert FileCacheStore(tmp_path).get("k") == {"pages": ["a"]}

    def test_missing_directory_is_a_miss(self, tmp_path: Path) -> None:
        assert FileCacheStore(tmp_path / "absent").get("k") is None

    def test_expired_entry_is_removed(self, tmp_path: Path) -> None:
        store = FileCacheStore(tmp_path)
        with patch("layadmin.services.cache_service.time.time", return_value=1000.0):
            store.put("k", "v", 5)
        with patch("layadmin.services.cache_service.time.time", return_value=1005.0):
            assert store.get("k") is None
        assert list(tmp_path.glob("*.json")) == []

    def test_corrupted_entry_is_a_miss(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = FileCacheStore(tmp_path)
        store.put("k", "v", 60)
        (entry,) = tmp_path.glob("*.json")
        entry.write_text("{broken", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert store.get("k") is None
        assert "unreadable cache entry" in caplog.text
        assert not entry.exists()

    @pytest.mark.parametrize("expires_at", ["soon", [1], {"at": 1}])
    def test_non_numeric_expiry_is_a_miss(self, tmp_path: Path, expires_at: object) -> None:
        store = FileCacheStore(tmp_path)
        store.put("k", {"pages": 1}, 60)
        (entry,) = tmp_path.glob("*.json")
        entry.write_text(json.dumps({"expires_at": expires_at, "value": {"pages": 1}}))
        assert store.get("k") is None
        assert not entry.exists()

    def test_concurrent_writers_share_a_key(self, tmp_path: Path) -> None:
        store = FileCacheStore(tmp_path)
        payload = {"dashboard.json": {"uri": "/admin/dashboard"}}
        errors: list[BaseException] = []

        def write() -> None:
            try:
                for _ in range(200):
                    store.put("k", payload, 60)
            except BaseException as exc:
                errors.append(exc)

        threads = [threading.Thread(target=write) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert store.get("k") == payload
        assert list(tmp_path.glob("*.tmp")) == []

    def test_entry_format(self, tmp_path: Path) -> None:
        store = FileCacheStore(tmp_path)
        store.put("k", [1, 2], 0)
        (entry,) = tmp_path.glob("*.json")
        assert json.loads(entry.read_text(encoding="utf-8")) == {
            "expires_at": None,
            "value": [1, 2],
        }

    def test_unserializable_value_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TypeError):
            FileCacheStore(tmp_path).put("k", {1, 2}, 60)

    def test_flush_removes_all_entries(self, tmp_path: Path) -> None:
        store = FileCacheStore(tmp_path)
        store.put("a", 1, 60)
        store.put("b", 2, 60)
        store.flush()
        assert store.get("a") is None
        assert store.get("b") is None


class TestNullCacheStore:
    def test_remember_always_produces(self) -> None:
        store = NullCacheStore()
        calls: list[int] = []

        def produce() -> int:
            calls.append(1)
            return len(calls)

        assert store.remember("k", 60, produce) == 1
        assert store.remember("k", 60, produce) == 2
        assert store.get("k") is None


class TestGetCacheStore:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("default", InMemoryCacheStore),
            ("memory", InMemoryCacheStore),
            ("file", FileCacheStore),
            ("null", NullCacheStore),
        ],
    )
    def test_known_names(self, name: str, expected: type, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, cache_store=name, cache_dir=tmp_path)
        store = get_cache_store(settings)
        assert isinstance(store, expected)
        assert isinstance(store, CacheStore)

    def test_unknown_name_falls_back_to_memory(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = Settings(_env_file=None, cache_store="redis")
        with caplog.at_level(logging.WARNING):
            store = get_cache_store(settings)
        assert isinstance(store, InMemoryCacheStore)
        assert "Unknown cache store 'redis'" in caplog.text
