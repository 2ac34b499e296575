"""
NIP-65 relay list metadata.

Turns a kind 10002 relay-list event (or a kind 10432 cache-relay
announcement, which uses the same ``r`` tag layout) into a
[RelayList][relayrouter.models.relay_list.RelayList]::

    ["r", "wss://both.relay"]
    ["r", "wss://inbox.relay", "read"]
    ["r", "wss://outbox.relay", "write"]

URLs are normalized; entries that fail normalization are dropped.
"""

from __future__ import annotations

import logging

from relayrouter.core.exceptions import RelayListParseError
from relayrouter.models.constants import EventKind, RelayScope
from relayrouter.models.event import Event
from relayrouter.models.relay import normalize_relay_url
from relayrouter.models.relay_list import RelayList, RelayListEntry


logger = logging.getLogger(__name__)

RELAY_LIST_KINDS: frozenset[int] = frozenset({EventKind.RELAY_LIST, EventKind.CACHE_RELAYS})


def relay_list_from_event(event: Event) -> RelayList:
    """Parse the ``r`` tags of a relay-list event.

    Args:
        event: A kind 10002 or kind 10432 event.

    Returns:
        The relay list, with ``created_at`` taken from the event.

    Raises:
        RelayListParseError: If the event is not a relay-list kind.
    """
    if event.kind not in RELAY_LIST_KINDS:
        raise RelayListParseError(f"Event kind {event.kind} is not a relay list")

    write: dict[str, None] = {}
    read: dict[str, None] = {}
    originals: dict[str, RelayListEntry] = {}

    for tag in event.tags:
        if len(tag) < 2 or tag[0] != "r":
            continue
        url = normalize_relay_url(tag[1])
        if url is None:
            logger.debug("relay_list_entry_dropped pubkey=%s url=%r", event.pubkey, tag[1])
            continue

        marker = tag[2] if len(tag) > 2 else ""
        if marker == RelayScope.READ:
            scope = RelayScope.READ
        elif marker == RelayScope.WRITE:
            scope = RelayScope.WRITE
        else:
            scope = RelayScope.BOTH

        if scope in (RelayScope.READ, RelayScope.BOTH):
            read.setdefault(url, None)
        if scope in (RelayScope.WRITE, RelayScope.BOTH):
            write.setdefault(url, None)
        originals.setdefault(url, RelayListEntry(url, scope))

    return RelayList(
        write=tuple(write),
        read=tuple(read),
        original_relays=tuple(originals.values()),
        created_at=event.created_at,
    )
