"""Concurrent fan-out with partial failure.

Every lookup the routing engine fans out (relay lists of mentioned users,
events referenced by mentions) may fail independently. Failures must never
abort the batch: a failed lookup contributes nothing and the caller
continues with whatever succeeded. This module makes that rule one named,
testable step instead of a ``try``/``except`` inside every loop.

Lookups run concurrently via ``asyncio.gather``, so the total latency is
bounded by the slowest lookup rather than the sum. ``CancelledError`` is
never swallowed.

Examples:
    ```python
    relay_lists = await collect_with_partial_failure(
        pubkeys,
        cache.get_relay_list,
        timeout=5.0,
        on_failure=lambda pubkey, error: log.warning("lookup_failed", pubkey=pubkey),
    )
    ```
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Generic, NamedTuple, TypeVar


logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")


class LookupOutcome(NamedTuple, Generic[K, T]):
    """Result of one lookup: either ``value`` or ``error`` is set."""

    key: K
    value: T | None
    error: Exception | None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _run_one(lookup: Callable[[K], Awaitable[T]], key: K, timeout: float | None) -> T:
    if timeout is None:
        return await lookup(key)
    return await asyncio.wait_for(lookup(key), timeout)


async def gather_outcomes(
    keys: Iterable[K],
    lookup: Callable[[K], Awaitable[T]],
    *,
    timeout: float | None = None,
) -> list[LookupOutcome[K, T]]:
    """Run ``lookup(key)`` for every key concurrently and capture each outcome.

    Args:
        keys: Lookup keys, in the order results should be reported.
        lookup: Coroutine function performing one lookup.
        timeout: Per-lookup timeout in seconds; a timeout is a failure.

    Returns:
        One outcome per key, in key order.
    """
    key_list = list(keys)
    if not key_list:
        return []

    results = await asyncio.gather(
        *(_run_one(lookup, key, timeout) for key in key_list),
        return_exceptions=True,
    )

    outcomes: list[LookupOutcome[K, T]] = []
    for key, result in zip(key_list, results, strict=True):
        if isinstance(result, Exception):
            outcomes.append(LookupOutcome(key, None, result))
        elif isinstance(result, BaseException):
            # CancelledError, KeyboardInterrupt: propagate
            raise result
        else:
            outcomes.append(LookupOutcome(key, result, None))
    return outcomes


async def collect_with_partial_failure(
    keys: Iterable[K],
    lookup: Callable[[K], Awaitable[T]],
    *,
    timeout: float | None = None,
    on_failure: Callable[[K, Exception], None] | None = None,
) -> list[T]:
    """Return the values of the successful lookups, discarding failures.

    Args:
        keys: Lookup keys.
        lookup: Coroutine function performing one lookup.
        timeout: Per-lookup timeout in seconds.
        on_failure: Called with ``(key, error)`` for every failed lookup.
            Defaults to a debug log line.

    Returns:
        Successful values in key order.
    """
    values: list[T] = []
    for outcome in await gather_outcomes(keys, lookup, timeout=timeout):
        if outcome.error is not None:
            if on_failure is not None:
                on_failure(outcome.key, outcome.error)
            else:
                logger.debug("lookup_failed key=%s error=%s", outcome.key, outcome.error)
            continue
        values.append(outcome.value)  # type: ignore[arg-type]
    return values


def flatten_unique(groups: Iterable[Iterable[str]]) -> list[str]:
    """Concatenate *groups*, keeping the first occurrence of every item."""
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return list(seen)
