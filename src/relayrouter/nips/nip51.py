"""
NIP-51 relay lists: favorites, blocked relays, and relay sets.

Also provides
[publish_context_from_events()][relayrouter.nips.nip51.publish_context_from_events],
which assembles a [PublishContext][relayrouter.models.context.PublishContext]
from the acting user's own list events, the way a client does right
after login.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from relayrouter.core.exceptions import ProtocolError
from relayrouter.models.constants import EventKind
from relayrouter.models.context import PublishContext
from relayrouter.models.event import Event
from relayrouter.models.relay import normalize_relay_urls
from relayrouter.models.relay_list import RelayList
from relayrouter.models.relay_set import RelaySet

from .nip65 import relay_list_from_event


RELAY_URL_LIST_KINDS: frozenset[int] = frozenset(
    {EventKind.FAVORITE_RELAYS, EventKind.BLOCKED_RELAYS}
)


def relay_urls_from_event(event: Event) -> list[str]:
    """Return the normalized ``relay`` tag URLs of a favorites or blocked-relays event.

    Raises:
        ProtocolError: If the event is not kind 10006 or 10012.
    """
    if event.kind not in RELAY_URL_LIST_KINDS:
        raise ProtocolError(f"Event kind {event.kind} is not a relay URL list")
    return normalize_relay_urls(event.tag_values("relay"))


def relay_set_from_event(event: Event) -> RelaySet:
    """Parse a kind 30002 relay set.

    The ``d`` tag is the identifier; the display name comes from the
    ``title`` tag, then ``name``, then falls back to the identifier.

    Raises:
        ProtocolError: If the event is not kind 30002 or has no ``d`` tag.
    """
    if event.kind != EventKind.RELAY_SET:
        raise ProtocolError(f"Event kind {event.kind} is not a relay set")

    d_tag = event.find_tag("d")
    if d_tag is None or len(d_tag) < 2:
        raise ProtocolError(f"Relay set {event.id[:16]}... has no d tag")
    set_id = d_tag[1]

    name = set_id
    for tag_name in ("title", "name"):
        tag = event.find_tag(tag_name)
        if tag is not None and len(tag) > 1 and tag[1]:
            name = tag[1]
            break

    return RelaySet(
        id=set_id,
        name=name,
        relay_urls=tuple(normalize_relay_urls(event.tag_values("relay"))),
    )


def publish_context_from_events(
    user_pubkey: str,
    *,
    relay_list_event: Event | None = None,
    cache_relays_event: Event | None = None,
    favorite_relays_event: Event | None = None,
    blocked_relays_event: Event | None = None,
    relay_set_events: Iterable[Event] = (),
    **action: Any,
) -> PublishContext:
    """Build a publish context from the acting user's own list events.

    Cache relays are merged into the user's relay list first, so they end
    up at the front of ``user_write_relays``.

    Args:
        user_pubkey: Hex public key of the acting user.
        relay_list_event: Kind 10002 relay list.
        cache_relays_event: Kind 10432 cache relays.
        favorite_relays_event: Kind 10012 favorites.
        blocked_relays_event: Kind 10006 blocked relays.
        relay_set_events: Kind 30002 relay sets.
        **action: Remaining context fields (``parent_event``, ``content``,
            ``is_public_message``, ``open_from``).
    """
    relay_list = (
        relay_list_from_event(relay_list_event) if relay_list_event is not None else None
    )
    if cache_relays_event is not None:
        cache = relay_list_from_event(cache_relays_event)
        relay_list = (relay_list or RelayList.empty()).merge_cache_relays(cache)

    return PublishContext(
        user_write_relays=relay_list.write if relay_list else (),
        user_read_relays=relay_list.read if relay_list else (),
        favorite_relays=(
            relay_urls_from_event(favorite_relays_event) if favorite_relays_event else ()
        ),
        blocked_relays=(
            relay_urls_from_event(blocked_relays_event) if blocked_relays_event else ()
        ),
        relay_sets=tuple(relay_set_from_event(event) for event in relay_set_events),
        user_pubkey=user_pubkey,
        **action,
    )
