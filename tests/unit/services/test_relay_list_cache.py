"""
Unit tests for services.relay_list_cache module.

Tests:
- InMemoryRelayListStore get/put/delete/clear
- RelayListCache store-first lookup with network fallback
- Cache-relay merging from kind 10432
- Failure degradation (fetch and store errors)
- Shared in-flight fetches and the not-found memory
- ingest_event() newest-wins semantics
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from relayrouter.core.exceptions import RelayListParseError, StorageError
from relayrouter.models import Event, RelayList
from relayrouter.services.relay_list_cache import InMemoryRelayListStore, RelayListCache
from tests.fixtures.collaborators import ALICE, BOB, FakeRelayListFetcher


class FailingStore(InMemoryRelayListStore):
    """Store whose reads or writes fail."""

    def __init__(self, *, fail_get: bool = False, fail_put: bool = False) -> None:
        super().__init__()
        self.fail_get = fail_get
        self.fail_put = fail_put

    async def get(self, pubkey: str, kind: int) -> RelayList | None:
        if self.fail_get:
            raise StorageError("store unavailable")
        return await super().get(pubkey, kind)

    async def put(self, pubkey: str, kind: int, relay_list: RelayList) -> None:
        if self.fail_put:
            raise StorageError("store read-only")
        await super().put(pubkey, kind, relay_list)


class TestInMemoryRelayListStore:
    """InMemoryRelayListStore."""

    async def test_put_get(self) -> None:
        """Test entries are keyed by pubkey and kind."""
        store = InMemoryRelayListStore()
        relay_list = RelayList(write=("wss://a.relay",))
        await store.put(ALICE, 10002, relay_list)
        assert await store.get(ALICE, 10002) == relay_list
        assert await store.get(ALICE, 10432) is None
        assert len(store) == 1

    async def test_delete_drops_every_kind(self) -> None:
        """Test delete removes all lists of one pubkey only."""
        store = InMemoryRelayListStore()
        await store.put(ALICE, 10002, RelayList())
        await store.put(ALICE, 10432, RelayList())
        await store.put(BOB, 10002, RelayList())
        await store.delete(ALICE)
        assert len(store) == 1
        assert await store.get(BOB, 10002) is not None

    async def test_clear(self) -> None:
        """Test clear empties the store."""
        store = InMemoryRelayListStore()
        await store.put(ALICE, 10002, RelayList())
        await store.clear()
        assert len(store) == 0


class TestGetRelayList:
    """RelayListCache.get_relay_list()."""

    async def test_miss_fetches_and_stores(
        self, relay_lists: dict[str, RelayList], store: InMemoryRelayListStore
    ) -> None:
        """Test a store miss fetches once and stores the result."""
        fetcher = FakeRelayListFetcher(relay_lists)
        cache = RelayListCache(fetcher, store)

        first = await cache.get_relay_list(BOB)
        second = await cache.get_relay_list(BOB)

        assert first == second == relay_lists[BOB]
        assert fetcher.calls == [BOB]
        assert await store.get(BOB, 10002) == relay_lists[BOB]

    async def test_hit_skips_network(self, store: InMemoryRelayListStore) -> None:
        """Test a stored list is returned without fetching."""
        fetcher = FakeRelayListFetcher()
        stored = RelayList(write=("wss://stored.relay",))
        await store.put(ALICE, 10002, stored)
        assert await RelayListCache(fetcher, store).get_relay_list(ALICE) == stored
        assert fetcher.calls == []

    async def test_empty_result_not_stored(self, store: InMemoryRelayListStore) -> None:
        """Test an unknown user is remembered in memory but never stored."""
        fetcher = FakeRelayListFetcher()
        cache = RelayListCache(fetcher, store)
        assert (await cache.get_relay_list(ALICE)).is_empty
        assert (await cache.get_relay_list(ALICE)).is_empty
        assert fetcher.calls == [ALICE]
        assert len(store) == 0

    async def test_unknown_user_retried_without_memory(
        self, store: InMemoryRelayListStore
    ) -> None:
        """Test not_found_ttl=0 looks an unknown user up every time."""
        fetcher = FakeRelayListFetcher()
        cache = RelayListCache(fetcher, store, not_found_ttl=0)
        await cache.get_relay_list(ALICE)
        await cache.get_relay_list(ALICE)
        assert fetcher.calls == [ALICE, ALICE]

    async def test_unknown_user_retried_after_ttl(self, store: InMemoryRelayListStore) -> None:
        """Test an unknown user is looked up again once the memory expires."""
        fetcher = FakeRelayListFetcher()
        cache = RelayListCache(fetcher, store, not_found_ttl=0.01)
        await cache.get_relay_list(ALICE)
        await asyncio.sleep(0.02)
        await cache.get_relay_list(ALICE)
        assert fetcher.calls == [ALICE, ALICE]

    async def test_invalidate_forgets_unknown_user(self, store: InMemoryRelayListStore) -> None:
        """Test invalidate lets an unknown user be fetched again."""
        fetcher = FakeRelayListFetcher()
        cache = RelayListCache(fetcher, store)
        await cache.get_relay_list(ALICE)
        await cache.invalidate(ALICE)
        await cache.get_relay_list(ALICE)
        assert fetcher.calls == [ALICE, ALICE]

    async def test_failed_fetch_not_remembered(self, store: InMemoryRelayListStore) -> None:
        """Test a failed lookup is retried on the next call."""
        fetcher = FakeRelayListFetcher(failing=[ALICE])
        cache = RelayListCache(fetcher, store)
        await cache.get_relay_list(ALICE)
        await cache.get_relay_list(ALICE)
        assert fetcher.calls == [ALICE, ALICE]

    async def test_concurrent_misses_share_one_fetch(
        self, relay_lists: dict[str, RelayList], store: InMemoryRelayListStore
    ) -> None:
        """Test simultaneous lookups of one pubkey hit the network once."""
        fetcher = FakeRelayListFetcher(relay_lists, delay=0.01)
        cache = RelayListCache(fetcher, store)

        results = await asyncio.gather(*(cache.get_relay_list(BOB) for _ in range(3)))

        assert results == [relay_lists[BOB]] * 3
        assert fetcher.calls == [BOB]

    async def test_concurrent_unknown_user_fetched_once(
        self, store: InMemoryRelayListStore
    ) -> None:
        """Test simultaneous lookups of a user without a list share one fetch."""
        fetcher = FakeRelayListFetcher(delay=0.01)
        cache = RelayListCache(fetcher, store, not_found_ttl=0)

        results = await asyncio.gather(cache.get_relay_list(ALICE), cache.get_relay_list(ALICE))

        assert all(result.is_empty for result in results)
        assert fetcher.calls == [ALICE]

    async def test_cancelled_waiter_keeps_shared_fetch(
        self, relay_lists: dict[str, RelayList], store: InMemoryRelayListStore
    ) -> None:
        """Test cancelling one waiter does not cancel the other's lookup."""
        fetcher = FakeRelayListFetcher(relay_lists, delay=0.02)
        cache = RelayListCache(fetcher, store)

        first = asyncio.ensure_future(cache.get_relay_list(BOB))
        second = asyncio.ensure_future(cache.get_relay_list(BOB))
        await asyncio.sleep(0)
        first.cancel()

        assert await second == relay_lists[BOB]
        assert first.cancelled()
        assert fetcher.calls == [BOB]

    async def test_cache_relays_merged_first(self, store: InMemoryRelayListStore) -> None:
        """Test stored kind 10432 relays are prepended."""
        await store.put(ALICE, 10002, RelayList(write=("wss://a.relay",), read=("wss://b.relay",)))
        await store.put(ALICE, 10432, RelayList(write=("ws://localhost:4869",), read=("ws://localhost:4869",)))
        relay_list = await RelayListCache(FakeRelayListFetcher(), store).get_relay_list(ALICE)
        assert relay_list.write == ("ws://localhost:4869", "wss://a.relay")
        assert relay_list.read == ("ws://localhost:4869", "wss://b.relay")

    async def test_fetch_failure_degrades_to_empty(self, store: InMemoryRelayListStore) -> None:
        """Test a failing fetch yields an empty list and stores nothing."""
        fetcher = FakeRelayListFetcher(failing=[ALICE])
        relay_list = await RelayListCache(fetcher, store).get_relay_list(ALICE)
        assert relay_list.is_empty
        assert len(store) == 0

    async def test_store_read_failure_degrades_to_empty(self) -> None:
        """Test a failing store read yields an empty list."""
        fetcher = FakeRelayListFetcher({ALICE: RelayList(write=("wss://a.relay",))})
        cache = RelayListCache(fetcher, FailingStore(fail_get=True))
        assert (await cache.get_relay_list(ALICE)).is_empty
        assert fetcher.calls == []

    async def test_store_write_failure_keeps_result(self) -> None:
        """Test a fetched list is returned even when storing it fails."""
        relay_list = RelayList(write=("wss://a.relay",))
        cache = RelayListCache(
            FakeRelayListFetcher({ALICE: relay_list}), FailingStore(fail_put=True)
        )
        assert await cache.get_relay_list(ALICE) == relay_list

    async def test_default_store(self) -> None:
        """Test a store is created when none is given."""
        assert isinstance(RelayListCache(FakeRelayListFetcher()).store, InMemoryRelayListStore)


class TestIngestEvent:
    """RelayListCache.ingest_event() and invalidation."""

    async def test_newest_wins(
        self, make_event: Callable[..., Event], store: InMemoryRelayListStore
    ) -> None:
        """Test an older event never replaces a newer stored list."""
        cache = RelayListCache(FakeRelayListFetcher(), store)
        newer = make_event(10002, pubkey=ALICE, tags=[["r", "wss://new.relay"]], created_at=200)
        older = make_event(10002, pubkey=ALICE, tags=[["r", "wss://old.relay"]], created_at=100)

        assert await cache.ingest_event(newer)
        assert not await cache.ingest_event(older)
        assert (await cache.get_relay_list(ALICE)).write == ("wss://new.relay",)

    async def test_cache_relays_event(
        self, make_event: Callable[..., Event], store: InMemoryRelayListStore
    ) -> None:
        """Test kind 10432 events are stored under their own kind."""
        cache = RelayListCache(FakeRelayListFetcher(), store)
        await cache.ingest_event(make_event(10432, pubkey=ALICE, tags=[["r", "ws://localhost"]]))
        assert (await store.get(ALICE, 10432)).write == ("ws://localhost",)  # type: ignore[union-attr]

    async def test_wrong_kind(self, make_event: Callable[..., Event]) -> None:
        """Test non relay-list events raise RelayListParseError."""
        cache = RelayListCache(FakeRelayListFetcher())
        with pytest.raises(RelayListParseError):
            await cache.ingest_event(make_event(1))

    async def test_invalidate_and_clear(
        self, make_event: Callable[..., Event], store: InMemoryRelayListStore
    ) -> None:
        """Test invalidate drops one user and clear drops all."""
        cache = RelayListCache(FakeRelayListFetcher(), store)
        await cache.ingest_event(make_event(10002, pubkey=ALICE, tags=[["r", "wss://a.relay"]]))
        await cache.ingest_event(make_event(10002, pubkey=BOB, tags=[["r", "wss://b.relay"]]))
        await cache.invalidate(ALICE)
        assert await store.get(ALICE, 10002) is None
        await cache.clear()
        assert len(store) == 0
