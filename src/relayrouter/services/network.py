"""Network lookups over ``nostr_sdk``.

[NostrSdkFetcher][relayrouter.services.network.NostrSdkFetcher] implements
the [RelayListFetcher][relayrouter.services.collaborators.RelayListFetcher]
and [EventFetcher][relayrouter.services.collaborators.EventFetcher]
collaborators with a single ``nostr_sdk.Client`` connected to a fixed set
of index relays. The client connects lazily on first use and is shut down
by [close()][relayrouter.services.network.NostrSdkFetcher.close] or on
leaving the ``async with`` block.

Transport errors are raised as
[ConnectivityError][relayrouter.core.exceptions.ConnectivityError] and
timeouts as [RelayTimeoutError][relayrouter.core.exceptions.RelayTimeoutError];
[RelayListCache][relayrouter.services.relay_list_cache.RelayListCache]
degrades both to an empty relay list.

Examples:
    ```python
    async with NostrSdkFetcher(["wss://purplepag.es"], timeout=10.0) as fetcher:
        relay_list = await fetcher.fetch_relay_list(pubkey)
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from nostr_sdk import ClientBuilder, EventId, Filter, Kind, NostrSdkError, PublicKey, RelayUrl

from relayrouter.core.exceptions import ConnectivityError, RelayTimeoutError
from relayrouter.models.constants import EventKind
from relayrouter.models.event import Event
from relayrouter.models.relay import normalize_relay_urls
from relayrouter.models.relay_list import RelayList
from relayrouter.nips.nip65 import relay_list_from_event


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostr_sdk import Client


logger = logging.getLogger(__name__)


class NostrSdkFetcher:
    """Fetch relay lists and events from a fixed set of relays.

    Args:
        relays: Relays queried for every lookup; invalid URLs are dropped.
        timeout: Per-request timeout in seconds.

    Raises:
        ValueError: If no valid relay URL is given.
    """

    def __init__(self, relays: Sequence[str], *, timeout: float = 10.0) -> None:
        self._relays = normalize_relay_urls(relays)
        if not self._relays:
            raise ValueError("at least one valid relay URL is required")
        self._timeout = timeout
        self._client: Client | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def relays(self) -> list[str]:
        return list(self._relays)

    async def __aenter__(self) -> NostrSdkFetcher:
        await self._get_client()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def _get_client(self) -> Client:
        async with self._connect_lock:
            if self._client is None:
                client = ClientBuilder().build()
                try:
                    for url in self._relays:
                        await client.add_relay(RelayUrl.parse(url))
                    await client.connect()
                except NostrSdkError as e:
                    raise ConnectivityError(f"Cannot connect to {self._relays}: {e}") from e
                self._client = client
                logger.debug("fetcher_connected relays=%d", len(self._relays))
            return self._client

    async def close(self) -> None:
        """Shut the client down; the next lookup reconnects."""
        client, self._client = self._client, None
        if client is not None:
            with contextlib.suppress(Exception):
                await client.shutdown()

    async def _fetch(self, event_filter: Filter) -> list[Any]:
        client = await self._get_client()
        try:
            events = await asyncio.wait_for(
                client.fetch_events(event_filter, timedelta(seconds=self._timeout)),
                # Outer bound in case the client ignores its own timeout
                self._timeout + 1.0,
            )
        except TimeoutError as e:
            raise RelayTimeoutError(f"Fetch timed out after {self._timeout}s") from e
        except NostrSdkError as e:
            raise ConnectivityError(f"Fetch failed: {e}") from e

        verified = []
        for evt in events.to_vec():
            try:
                if evt.verify():
                    verified.append(evt)
            except (ValueError, TypeError, OverflowError):
                continue
        return verified

    async def fetch_relay_list(self, pubkey: str) -> RelayList:
        """Return the newest kind 10002 list of *pubkey*, or an empty list.

        Raises:
            ConnectivityError: On transport failure.
            RelayTimeoutError: If the relays do not answer in time.
        """
        try:
            author = PublicKey.parse(pubkey)
        except NostrSdkError as e:
            raise ValueError(f"Invalid public key: {pubkey!r}") from e

        event_filter = Filter().author(author).kind(Kind(EventKind.RELAY_LIST)).limit(1)
        events = await self._fetch(event_filter)
        if not events:
            return RelayList.empty()
        newest = max(events, key=lambda evt: evt.created_at().as_secs())
        return relay_list_from_event(Event.from_nostr(newest))

    async def fetch_event(self, event_id: str) -> Event | None:
        """Return the event with *event_id*, or ``None`` if no relay has it.

        Raises:
            ConnectivityError: On transport failure.
            RelayTimeoutError: If the relays do not answer in time.
        """
        try:
            target = EventId.parse(event_id)
        except NostrSdkError as e:
            raise ValueError(f"Invalid event ID: {event_id!r}") from e

        events = await self._fetch(Filter().id(target).limit(1))
        for evt in events:
            if evt.id().to_hex() == target.to_hex():
                return Event.from_nostr(evt)
        return None
