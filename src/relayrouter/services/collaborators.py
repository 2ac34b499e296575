"""Contracts of the collaborators the routing engine consumes.

The engine never opens sockets, persists data, or decodes bech32 itself.
These protocols describe what it needs; default implementations live in
[network][relayrouter.services.network] (``nostr_sdk``),
[relay_list_cache][relayrouter.services.relay_list_cache] (in-memory store),
[hints][relayrouter.services.hints] (seen-on index) and
[nip19][relayrouter.nips.nip19] (decoder).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from relayrouter.models.event import Event
    from relayrouter.models.relay_list import RelayList
    from relayrouter.nips.nip19 import Nip19Entity


@runtime_checkable
class EventFetcher(Protocol):
    """Resolves an event ID to the event, used only for event mentions."""

    async def fetch_event(self, event_id: str) -> Event | None: ...


@runtime_checkable
class RelayListFetcher(Protocol):
    """Fetches a user's NIP-65 relay list from the network on cache miss."""

    async def fetch_relay_list(self, pubkey: str) -> RelayList: ...


@runtime_checkable
class Nip19Decoder(Protocol):
    """Decodes a bech32 mention identifier; raises on malformed input."""

    def decode(self, identifier: str) -> Nip19Entity: ...


@runtime_checkable
class EventHintSource(Protocol):
    """Relays an event was seen on, in the order they were first seen."""

    def get_event_hints(self, event_id: str) -> list[str]: ...


@runtime_checkable
class RelayListStore(Protocol):
    """Local key-value store of relay lists keyed by ``(pubkey, kind)``."""

    async def get(self, pubkey: str, kind: int) -> RelayList | None: ...

    async def put(self, pubkey: str, kind: int, relay_list: RelayList) -> None: ...

    async def delete(self, pubkey: str) -> None: ...

    async def clear(self) -> None: ...
