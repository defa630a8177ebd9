"""Per-run cache of package metadata that shares in-flight fetches."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from common.logging_utils import extra_context, is_debug_enabled
from common.request_queue import RequestQueue
from errors import RegistryError
from .models import PackageMetadata

logger = logging.getLogger(__name__)


class PackageMetadataCache:
    """Memoizes registry fetches by package name for the lifetime of a run.

    The first request for a name stores a pending task before anything is
    awaited, so every concurrent caller for that name awaits the same fetch.
    A failed fetch is cached as None and never retried.
    """

    def __init__(self, client, queue: RequestQueue):
        """Initialize the cache.

        Args:
            client: Object with an async ``fetch(name) -> PackageMetadata``.
            queue: Request queue every fetch is submitted through.
        """
        self._client = client
        self._queue = queue
        self._entries: Dict[str, asyncio.Task] = {}
        self._failures: Dict[str, str] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def fetch_count(self) -> int:
        """Number of distinct fetches started."""
        return len(self._entries)

    @property
    def failures(self) -> Dict[str, str]:
        """Package name -> error message for fetches that failed."""
        return dict(self._failures)

    def get_or_fetch(self, name: str) -> "asyncio.Task[Optional[PackageMetadata]]":
        """Return the shared task resolving to the metadata of ``name`` (or None).

        Lookup and insertion happen without yielding to the event loop.
        """
        entry = self._entries.get(name)
        if entry is None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Cache miss",
                    extra=extra_context(event="cache_miss", component="metadata_cache", package=name),
                )
            entry = asyncio.ensure_future(self._load(name))
            self._entries[name] = entry
        return entry

    async def _load(self, name: str) -> Optional[PackageMetadata]:
        try:
            return await self._queue.submit(lambda: self._client.fetch(name))
        except RegistryError as exc:
            self._failures[name] = str(exc)
            logger.warning(
                "Skipping %s: %s",
                name,
                exc,
                extra=extra_context(event="fetch_failed", component="metadata_cache", package=name),
            )
            return None
