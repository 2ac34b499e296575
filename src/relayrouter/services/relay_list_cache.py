"""Relay-list lookups backed by a local store.

[RelayListCache][relayrouter.services.relay_list_cache.RelayListCache]
answers "which relays does this user read from / write to?" for the rest of
the engine. The local store is consulted first; on a miss the kind 10002
list is fetched from the network and stored. The user's kind 10432
cache-relay announcement, if the store holds one, is merged on top so that
cache relays come first. Cache-relay lists are never fetched from the
network. Concurrent misses for one pubkey share a single fetch.

A failed lookup never propagates: the caller gets an empty
[RelayList][relayrouter.models.relay_list.RelayList] and a warning is
logged.

See Also:
    [RelayListStore][relayrouter.services.collaborators.RelayListStore]:
        Storage contract.
    [relay_list_from_event][relayrouter.nips.nip65.relay_list_from_event]:
        Parser used by
        [ingest_event()][relayrouter.services.relay_list_cache.RelayListCache.ingest_event].
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.core.metrics import RELAY_LIST_LOOKUPS
from relayrouter.models.constants import EventKind
from relayrouter.models.relay_list import RelayList
from relayrouter.nips.nip65 import relay_list_from_event


if TYPE_CHECKING:
    from relayrouter.models.event import Event

    from .collaborators import RelayListFetcher, RelayListStore


class InMemoryRelayListStore:
    """Dict-backed [RelayListStore][relayrouter.services.collaborators.RelayListStore].

    Entries never expire; callers drop them with ``delete`` or ``clear``.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, int], RelayList] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, pubkey: str, kind: int) -> RelayList | None:
        return self._entries.get((pubkey, kind))

    async def put(self, pubkey: str, kind: int, relay_list: RelayList) -> None:
        async with self._lock:
            self._entries[(pubkey, kind)] = relay_list

    async def delete(self, pubkey: str) -> None:
        async with self._lock:
            for key in [key for key in self._entries if key[0] == pubkey]:
                del self._entries[key]

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()


class RelayListCache:
    """Store-first relay-list lookup with network fallback.

    Args:
        fetcher: Network source for kind 10002 lists on store miss.
        store: Local store; defaults to a fresh
            [InMemoryRelayListStore][relayrouter.services.relay_list_cache.InMemoryRelayListStore].
        not_found_ttl: Seconds a pubkey without a relay list is answered
            empty without refetching; ``0`` disables the memory.
        logger: Structured logger; defaults to ``Logger("relay_list_cache")``.

    Examples:
        ```python
        cache = RelayListCache(fetcher, InMemoryRelayListStore())
        relay_list = await cache.get_relay_list(pubkey)
        relay_list.read   # inbox relays, cache relays first
        ```
    """

    def __init__(
        self,
        fetcher: RelayListFetcher,
        store: RelayListStore | None = None,
        logger: Logger | None = None,
        *,
        not_found_ttl: float = 60.0,
    ) -> None:
        self._fetcher = fetcher
        self._store: RelayListStore = store if store is not None else InMemoryRelayListStore()
        self._logger = logger or Logger("relay_list_cache")
        self._pending: dict[str, asyncio.Task[RelayList | None]] = {}
        self._not_found_ttl = not_found_ttl
        self._not_found: dict[str, float] = {}

    @property
    def store(self) -> RelayListStore:
        return self._store

    async def get_relay_list(self, pubkey: str) -> RelayList:
        """Return *pubkey*'s relay list with cache relays merged in.

        Never raises: a store or network failure yields an empty list.
        """
        try:
            relay_list = await self._store.get(pubkey, EventKind.RELAY_LIST)
            cache_relays = await self._store.get(pubkey, EventKind.CACHE_RELAYS)
        except Exception as e:  # Intentionally broad: any store backend may fail
            RELAY_LIST_LOOKUPS.labels(result="error").inc()
            self._logger.warning("relay_list_store_failed", pubkey=pubkey, error=str(e))
            return RelayList.empty()

        if relay_list is not None:
            RELAY_LIST_LOOKUPS.labels(result="hit").inc()
        else:
            if self._recently_not_found(pubkey):
                RELAY_LIST_LOOKUPS.labels(result="not_found").inc()
                relay_list = RelayList.empty()
            else:
                RELAY_LIST_LOOKUPS.labels(result="miss").inc()
                relay_list = await self._fetch_once(pubkey)
                if relay_list is None:
                    return RelayList.empty()

        if cache_relays is not None:
            return relay_list.merge_cache_relays(cache_relays)
        return relay_list

    async def _fetch_once(self, pubkey: str) -> RelayList | None:
        """Join the in-flight fetch for *pubkey*, or start one.

        Concurrent misses for the same pubkey share a single network lookup.
        A cancelled waiter does not cancel the shared fetch.
        """
        task = self._pending.get(pubkey)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(pubkey))
            self._pending[pubkey] = task
            task.add_done_callback(lambda done: self._forget_pending(pubkey, done))
        else:
            self._logger.debug("relay_list_fetch_joined", pubkey=pubkey)
        return await asyncio.shield(task)

    def _recently_not_found(self, pubkey: str) -> bool:
        expires = self._not_found.get(pubkey)
        if expires is None:
            return False
        if time.monotonic() >= expires:
            del self._not_found[pubkey]
            return False
        return True

    def _forget_pending(self, pubkey: str, task: asyncio.Task[RelayList | None]) -> None:
        if self._pending.get(pubkey) is task:
            del self._pending[pubkey]

    async def _fetch_and_store(self, pubkey: str) -> RelayList | None:
        try:
            relay_list = await self._fetcher.fetch_relay_list(pubkey)
        except Exception as e:  # Intentionally broad: network failures degrade to empty
            RELAY_LIST_LOOKUPS.labels(result="error").inc()
            self._logger.warning("relay_list_fetch_failed", pubkey=pubkey, error=str(e))
            return None

        if relay_list.is_empty:
            self._logger.debug("relay_list_not_found", pubkey=pubkey)
            if self._not_found_ttl > 0:
                self._not_found[pubkey] = time.monotonic() + self._not_found_ttl
            return relay_list

        try:
            await self._put_newest(pubkey, EventKind.RELAY_LIST, relay_list)
        except Exception as e:  # Intentionally broad: the fetched list is still usable
            self._logger.warning("relay_list_store_failed", pubkey=pubkey, error=str(e))
        return relay_list

    async def _put_newest(self, pubkey: str, kind: int, relay_list: RelayList) -> bool:
        current = await self._store.get(pubkey, kind)
        if current is not None and current.created_at > relay_list.created_at:
            return False
        await self._store.put(pubkey, kind, relay_list)
        return True

    async def ingest_event(self, event: Event) -> bool:
        """Store a kind 10002 or kind 10432 event seen on the wire.

        An event older than the stored list for the same pubkey and kind is
        ignored.

        Returns:
            True if the store was updated.

        Raises:
            RelayListParseError: If *event* is not a relay-list kind.
        """
        relay_list = relay_list_from_event(event)
        self._not_found.pop(event.pubkey, None)
        updated = await self._put_newest(event.pubkey, event.kind, relay_list)
        if updated:
            self._logger.debug(
                "relay_list_ingested",
                pubkey=event.pubkey,
                kind=event.kind,
                relays=len(relay_list.original_relays),
            )
        return updated

    async def invalidate(self, pubkey: str) -> None:
        """Drop every stored list of *pubkey*."""
        self._not_found.pop(pubkey, None)
        await self._store.delete(pubkey)

    async def clear(self) -> None:
        """Drop every stored list."""
        self._not_found.clear()
        await self._store.clear()


__all__ = ["InMemoryRelayListStore", "RelayListCache"]
