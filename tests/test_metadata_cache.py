"""Tests for the per-run package metadata cache."""

import asyncio

from common.request_queue import RequestQueue
from errors import RegistryParseError
from resolution.cache import PackageMetadataCache

from conftest import FakeRegistry, packument


def _registry():
    return FakeRegistry({
        "a": packument({"1.0.0": {"time": "2020-01-01T00:00:00.000Z"}}),
        "broken": RegistryParseError("broken", "Invalid JSON for broken"),
    }, delay=0.001)


class TestPackageMetadataCache:
    """Sharing of in-flight fetches and soft failures."""

    def test_concurrent_callers_share_one_fetch(self):
        registry = _registry()
        cache = PackageMetadataCache(registry, RequestQueue(5))

        async def _run():
            return await asyncio.gather(*(cache.get_or_fetch("a") for _ in range(10)))

        results = asyncio.run(_run())

        assert registry.calls["a"] == 1
        assert all(r is results[0] for r in results)
        assert results[0].versions() == ["1.0.0"]
        assert cache.fetch_count == 1
        assert "a" in cache

    def test_pending_entry_registered_before_fetch_completes(self):
        registry = _registry()
        cache = PackageMetadataCache(registry, RequestQueue(1))

        async def _run():
            first = cache.get_or_fetch("a")
            assert "a" in cache
            assert registry.calls["a"] == 0
            second = cache.get_or_fetch("a")
            assert first is second
            await first

        asyncio.run(_run())
        assert registry.calls["a"] == 1

    def test_failure_is_cached_as_none_without_retry(self):
        registry = _registry()
        cache = PackageMetadataCache(registry, RequestQueue(2))

        async def _run():
            first = await cache.get_or_fetch("broken")
            second = await cache.get_or_fetch("broken")
            missing = await cache.get_or_fetch("missing")
            return first, second, missing

        first, second, missing = asyncio.run(_run())

        assert first is None and second is None and missing is None
        assert registry.calls["broken"] == 1
        assert registry.calls["missing"] == 1
        assert set(cache.failures) == {"broken", "missing"}

    def test_fetches_go_through_the_queue(self):
        registry = FakeRegistry(
            {name: packument({"1.0.0": {"time": "2020-01-01T00:00:00.000Z"}}) for name in "abcdefgh"},
            delay=0.001,
        )
        queue = RequestQueue(2)
        cache = PackageMetadataCache(registry, queue)

        async def _run():
            await asyncio.gather(*(cache.get_or_fetch(name) for name in "abcdefgh"))

        asyncio.run(_run())

        assert registry.peak_in_flight <= 2
        assert queue.dispatched == 8
        assert len(cache) == 8
