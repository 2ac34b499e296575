"""NIP implementations used by the routing engine.

Attributes:
    nip19: ``nostr:`` mention detection and bech32 decoding via ``nostr_sdk``.
    nip51: Favorite relays, blocked relays, relay sets, and building a
        [PublishContext][relayrouter.models.context.PublishContext] from them.
    nip65: Relay list metadata (kind 10002) and cache relays (kind 10432).
"""

from .nip19 import (
    MENTION_PATTERN,
    Nip19Entity,
    Nip19Type,
    NostrSdkNip19Decoder,
    find_mention_identifiers,
)
from .nip51 import publish_context_from_events, relay_set_from_event, relay_urls_from_event
from .nip65 import RELAY_LIST_KINDS, relay_list_from_event


__all__ = [
    "MENTION_PATTERN",
    "RELAY_LIST_KINDS",
    "Nip19Entity",
    "Nip19Type",
    "NostrSdkNip19Decoder",
    "find_mention_identifiers",
    "publish_context_from_events",
    "relay_list_from_event",
    "relay_set_from_event",
    "relay_urls_from_event",
]
