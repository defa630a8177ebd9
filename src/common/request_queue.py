"""FIFO request queue capping the number of concurrently running tasks."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Set, Tuple, TypeVar

from constants import Constants

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[Any]]


class RequestQueue:
    """Dispatch submitted tasks in submission order, at most ``max_parallel`` at once.

    A task is a zero-argument callable returning an awaitable. It is only
    called once a slot is free. The outcome of each task, result or
    exception, goes to the future handed back to whoever submitted it;
    a failing task never affects the others.

    All bookkeeping happens on the event loop thread, so no locking is needed.
    """

    def __init__(self, max_parallel: int = Constants.MAX_PARALLEL_REQUESTS):
        """Initialize the queue.

        Args:
            max_parallel: Ceiling on simultaneously running tasks (>= 1).

        Raises:
            ValueError: If max_parallel is below 1.
        """
        if max_parallel < 1:
            raise ValueError(f"max_parallel must be at least 1, got {max_parallel}")
        self._max_parallel = max_parallel
        self._pending: Deque[Tuple[TaskFactory, asyncio.Future]] = deque()
        self._running: Set[asyncio.Task] = set()
        self._in_flight = 0
        self._peak_in_flight = 0
        self._dispatched = 0

    @property
    def max_parallel(self) -> int:
        return self._max_parallel

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def peak_in_flight(self) -> int:
        """Highest in-flight count observed so far."""
        return self._peak_in_flight

    @property
    def dispatched(self) -> int:
        return self._dispatched

    def submit(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Queue ``task`` and return a future for its outcome.

        Must be called from within a running event loop.
        """
        future = asyncio.get_running_loop().create_future()
        self._pending.append((task, future))
        self._dispatch()
        return future

    def _dispatch(self) -> None:
        while self._in_flight < self._max_parallel and self._pending:
            factory, future = self._pending.popleft()
            if future.cancelled():
                continue
            self._in_flight += 1
            self._dispatched += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
            runner = asyncio.ensure_future(self._run(factory, future))
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)

    async def _run(self, factory: TaskFactory, future: asyncio.Future) -> None:
        try:
            result = await factory()
        except asyncio.CancelledError:
            if not future.done():
                future.cancel()
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Delivered to the submitter, never raised here
            logger.debug("Queued task failed: %s", exc)
            if not future.done():
                future.set_exception(exc)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            self._in_flight -= 1
            self._dispatch()

    def stats(self) -> dict:
        """Snapshot of the queue counters."""
        return {
            "max_parallel": self._max_parallel,
            "in_flight": self._in_flight,
            "pending": len(self._pending),
            "peak_in_flight": self._peak_in_flight,
            "dispatched": self._dispatched,
        }
