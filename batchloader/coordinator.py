"""Request batching and deduplication for key-based lookups.

This module implements a batch coordinator that solves the N+1-call
problem: many callers each ask for a value by key during the same event
loop iteration, and a single bulk fetch serves all of them. Identical keys
within one batch share a single future.

Example usage:
    async def fetch_users(user_ids: list[int]) -> list[User]:
        return await db.users_by_ids(user_ids)

    users = BatchCoordinator(fetch_users, name="users")

    # Three requests, one fetch_users([1, 2, 3]) call
    alice, bob, carol = await asyncio.gather(
        users.request(1),
        users.request(2),
        users.request(3),
    )

A coordinator holds no state between batches, but the futures of an open
batch are visible to every caller sharing the instance. Servers that must
keep requests apart should create one coordinator per request scope.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .config import validate_options
from .const import (
    CONF_DELAY,
    CONF_KEY_FN,
    CONF_NAME,
    CONF_SCHEDULE,
    DEFAULT_DELAY,
    DEFAULT_NAME,
    DEFAULT_SCHEDULE,
    SCHEDULE_TIMER,
)
from .exceptions import LoaderContractError
from .keys import canonical_key
from .metrics import LoaderStats

_LOGGER = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

FetchFunc = Callable[[list[K]], Sequence[V] | Awaitable[Sequence[V]]]


@dataclass(frozen=True, slots=True)
class _Batch(Generic[K, V]):
    """Keys and futures of one flushed batch, aligned by position."""

    keys: tuple[K, ...]
    futures: tuple[asyncio.Future[V], ...]
    started: float


class BatchCoordinator(Generic[K, V]):
    """Coalesces key requests made in the same loop iteration into one fetch.

    The first request() in an idle coordinator schedules a flush. Every
    request made before that flush runs joins the batch; repeated keys get
    the future already created for them. The flush resets the coordinator
    before calling the fetch function, so requests made while a fetch is in
    flight start a new batch.

    The fetch function receives the distinct keys in first-request order and
    must return (directly or through an awaitable) a sequence of values
    aligned with them. If it raises, every future in the batch fails with
    that exception.

    Attributes:
        _keys: Distinct keys of the open batch, in first-request order.
        _futures: Futures of the open batch, aligned with _keys.
        _pending: Canonical key to future map used for deduplication.
        _flush_handle: Handle of the scheduled flush, None when idle.
        _in_flight: Tasks awaiting asynchronous fetch results.
    """

    def __init__(
        self,
        fetch: FetchFunc[K, V],
        *,
        name: str = DEFAULT_NAME,
        key_fn: Callable[[K], Hashable] | None = None,
        schedule: str = DEFAULT_SCHEDULE,
        delay: float = DEFAULT_DELAY,
    ) -> None:
        """Initialize the batch coordinator.

        Args:
            fetch: Bulk fetch function, synchronous or asynchronous.
            name: Name used in log messages.
            key_fn: Derives the deduplication key for a request. Defaults to
                canonical_key.
            schedule: "soon" flushes on the next loop iteration, "timer"
                flushes after delay seconds.
            delay: Batch window in seconds for the "timer" schedule.

        Raises:
            InvalidOptionsError: If any option fails validation.
        """
        self._options = validate_options(
            {
                CONF_NAME: name,
                CONF_KEY_FN: key_fn,
                CONF_SCHEDULE: schedule,
                CONF_DELAY: delay,
            }
        )
        self._fetch = fetch
        self._key_fn: Callable[[Any], Hashable] = self._options.key_fn or canonical_key
        self._keys: list[K] = []
        self._futures: list[asyncio.Future[V]] = []
        self._pending: dict[Hashable, asyncio.Future[V]] = {}
        self._flush_handle: asyncio.Handle | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._stats = LoaderStats()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._options.name!r}, schedule={self._options.schedule!r})"

    @property
    def name(self) -> str:
        """Return the coordinator name."""
        return self._options.name

    def request(self, key: K) -> asyncio.Future[V]:
        """Request the value for key as part of the current batch.

        Must be called from a running event loop. Never blocks and never
        raises for fetch problems; failures are delivered via the future.

        Args:
            key: The key to load.

        Returns:
            Future for the value. Requests for the same key in the same
            batch return the same future instance.
        """
        dedup_key = self._key_fn(key)

        existing = self._pending.get(dedup_key)
        if existing is not None:
            self._stats.record_request(deduplicated=True)
            _LOGGER.debug("Deduplicated request for %r in '%s'", key, self._options.name)
            return existing

        loop = asyncio.get_running_loop()
        future: asyncio.Future[V] = loop.create_future()
        self._keys.append(key)
        self._futures.append(future)
        self._pending[dedup_key] = future
        self._stats.record_request(deduplicated=False)

        if self._flush_handle is None:
            self._flush_handle = self._schedule_flush(loop)

        return future

    async def request_many(self, keys: Iterable[K]) -> list[V]:
        """Request several keys in one batch.

        Args:
            keys: Keys to load; duplicates are allowed.

        Returns:
            Values in the same order as keys.

        Raises:
            Exception: The fetch failure of the batch, if any.
        """
        futures = [self.request(key) for key in keys]
        return list(await asyncio.gather(*futures))

    def get_stats(self) -> dict[str, int | float]:
        """Get batching statistics.

        Returns:
            Counters from LoaderStats plus the number of keys waiting in
            the open batch and the number of fetches still in flight.
        """
        stats = self._stats.to_dict()
        stats["pending"] = len(self._keys)
        stats["in_flight"] = len(self._in_flight)
        return stats

    def reset_stats(self) -> None:
        """Reset statistics counters.

        Does not affect the open batch or in-flight fetches.
        """
        self._stats = LoaderStats()

    def _schedule_flush(self, loop: asyncio.AbstractEventLoop) -> asyncio.Handle:
        """Schedule the flush of the open batch."""
        if self._options.schedule == SCHEDULE_TIMER:
            return loop.call_later(self._options.delay, self._flush)
        return loop.call_soon(self._flush)

    def _flush(self) -> None:
        """Hand the open batch to the fetch function.

        Coordinator state is reset before the fetch is invoked so that
        requests made during the fetch open a new batch.
        """
        if not self._keys:
            self._flush_handle = None
            return

        batch: _Batch[K, V] = _Batch(
            keys=tuple(self._keys),
            futures=tuple(self._futures),
            started=time.monotonic(),
        )
        self._keys = []
        self._futures = []
        self._pending = {}
        self._flush_handle = None

        _LOGGER.debug(
            "Flushing batch of %d key(s) in '%s'",
            len(batch.keys),
            self._options.name,
        )

        try:
            result = self._fetch(list(batch.keys))
        except Exception as exc:
            self._fail(batch, exc)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(self._await_result(batch, result))
            self._in_flight.add(task)
            task.add_done_callback(functools.partial(self._fetch_done, batch))
            return

        self._resolve(batch, result)

    async def _await_result(self, batch: _Batch[K, V], result: Awaitable[Sequence[V]]) -> None:
        """Await an asynchronous fetch result and dispatch it."""
        try:
            values = await result
        except Exception as exc:
            self._fail(batch, exc)
            return

        self._resolve(batch, values)

    def _fetch_done(self, batch: _Batch[K, V], task: asyncio.Task[None]) -> None:
        """Forget a finished fetch task, cancelling its futures if it was cancelled."""
        self._in_flight.discard(task)
        if task.cancelled():
            for future in batch.futures:
                future.cancel()

    def _resolve(self, batch: _Batch[K, V], values: object) -> None:
        """Fulfil each future with the value at its position."""
        if not isinstance(values, Sequence):
            self._fail(
                batch,
                LoaderContractError(
                    f"Fetch for '{self._options.name}' returned {type(values).__name__}, "
                    f"expected a sequence of {len(batch.keys)} value(s)",
                    expected=len(batch.keys),
                    actual=values,
                ),
            )
            return

        if len(values) != len(batch.keys):
            _LOGGER.warning(
                "Fetch for '%s' returned %d value(s) for %d key(s); results are matched by position",
                self._options.name,
                len(values),
                len(batch.keys),
            )

        for future, value in zip(batch.futures, values):
            if not future.done():
                future.set_result(value)

        self._record(batch, success=True)

    def _fail(self, batch: _Batch[K, V], exc: BaseException) -> None:
        """Fail every future in the batch with the same exception."""
        if isinstance(exc, StopIteration):
            # Futures refuse StopIteration, as coroutines do
            wrapped = RuntimeError(f"Fetch for '{self._options.name}' raised StopIteration")
            wrapped.__cause__ = exc
            exc = wrapped

        _LOGGER.debug(
            "Fetch for '%s' failed for %d key(s): %s",
            self._options.name,
            len(batch.keys),
            exc,
            exc_info=exc,
        )
        for future in batch.futures:
            if not future.done():
                future.set_exception(exc)

        self._record(batch, success=False)

    def _record(self, batch: _Batch[K, V], *, success: bool) -> None:
        duration_ms = (time.monotonic() - batch.started) * 1000
        self._stats.record_batch(len(batch.keys), duration_ms, success=success)


__all__ = ["BatchCoordinator", "FetchFunc"]
