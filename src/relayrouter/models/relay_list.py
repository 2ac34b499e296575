"""
NIP-65 relay list with cache-relay merging.

A [RelayList][relayrouter.models.relay_list.RelayList] is the flattened view
of a user's replaceable relay-list event: which relays they write to
(outbox) and which they read from (inbox). ``original_relays`` keeps the
scope each relay was declared with.

See Also:
    [relayrouter.nips.nip65][]: Builds relay lists from kind 10002 and
        kind 10432 events.
    [relayrouter.services.relay_list_cache][]: Caches relay lists per pubkey
        and merges cache relays on top.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from ._validation import validate_timestamp
from .constants import RelayScope
from .relay import is_valid_relay_url


class RelayListEntry(NamedTuple):
    """A relay as declared in a relay-list event, with its scope."""

    url: str
    scope: RelayScope


def _dedupe(urls: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(urls))


@dataclass(frozen=True, slots=True)
class RelayList:
    """Immutable read/write relay list of one user.

    Attributes:
        write: Outbox relays, in declaration order.
        read: Inbox relays, in declaration order.
        original_relays: Declared relays with their scope.
        created_at: Timestamp of the source event (``0`` when unknown).
            Used to keep only the newest version of a replaceable list.

    Examples:
        ```python
        own = RelayList(write=("wss://a.relay",), read=("wss://b.relay",))
        cache = RelayList(write=("ws://192.168.1.2",), read=("ws://192.168.1.2",))
        own.merge_cache_relays(cache).write
        # ('ws://192.168.1.2', 'wss://a.relay')
        ```
    """

    write: tuple[str, ...] = field(default_factory=tuple)
    read: tuple[str, ...] = field(default_factory=tuple)
    original_relays: tuple[RelayListEntry, ...] = field(default_factory=tuple)
    created_at: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "write", tuple(self.write))
        object.__setattr__(self, "read", tuple(self.read))
        object.__setattr__(
            self,
            "original_relays",
            tuple(RelayListEntry(url, RelayScope(scope)) for url, scope in self.original_relays),
        )
        validate_timestamp(self.created_at, "created_at")

    @classmethod
    def empty(cls) -> RelayList:
        """Return a relay list with no relays."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.write and not self.read

    def relays_for(self, scope: RelayScope) -> tuple[str, ...]:
        """Return the read or write side of the list."""
        return self.read if scope == RelayScope.READ else self.write

    def merge_cache_relays(self, cache: RelayList) -> RelayList:
        """Return a new list with *cache* relays prepended to both sides.

        Cache relays take priority for connection ordering. Structurally
        invalid URLs (empty strings, bare schemes) are removed from both
        inputs and the result is deduplicated in order. In
        ``original_relays`` the cache relay's declared scope wins.
        """
        write = [u for u in cache.write if is_valid_relay_url(u)]
        write += [u for u in self.write if is_valid_relay_url(u)]
        read = [u for u in cache.read if is_valid_relay_url(u)]
        read += [u for u in self.read if is_valid_relay_url(u)]

        originals: dict[str, RelayListEntry] = {}
        for entry in (*cache.original_relays, *self.original_relays):
            originals.setdefault(entry.url, entry)

        return RelayList(
            write=_dedupe(write),
            read=_dedupe(read),
            original_relays=tuple(originals.values()),
            created_at=max(self.created_at, cache.created_at),
        )
