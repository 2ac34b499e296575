"""Shared constants for the models layer.

Defines the enumerations and well-known relay lists used across the model,
NIP, and service modules. Placing them here avoids circular dependencies
between the models and services layers.

See Also:
    [relayrouter.models.relay][]: Uses [NetworkType][relayrouter.models.constants.NetworkType]
        to classify relay URLs during normalization.
    [relayrouter.services.selected][]: Dispatches selection rules on
        [EventKind][relayrouter.models.constants.EventKind].
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class NetworkType(StrEnum):
    """Network type enum for relay classification.

    Every normalized relay URL maps to exactly one network type. Unlike a
    relay crawler, a client keeps ``LOCAL`` relays: they are the user's own
    cache relays and must survive normalization.

    Attributes:
        CLEARNET: Public internet relay.
        TOR: Tor hidden service identified by a ``.onion`` hostname.
        I2P: I2P eepsite identified by a ``.i2p`` hostname.
        LOKI: Lokinet service identified by a ``.loki`` hostname.
        LOCAL: Loopback, private, or link-local address (cache relays).
        UNKNOWN: Hostname that could not be classified.

    Examples:
        ```python
        detect_network("relay.damus.io")   # NetworkType.CLEARNET
        detect_network("192.168.1.10")     # NetworkType.LOCAL
        detect_network("abc123.onion")     # NetworkType.TOR
        ```
    """

    CLEARNET = "clearnet"
    TOR = "tor"
    I2P = "i2p"
    LOKI = "loki"
    LOCAL = "local"
    UNKNOWN = "unknown"


class RelayScope(StrEnum):
    """Declared usage of a relay inside a NIP-65 relay list.

    A relay tag without a marker is used for both reading and writing.
    """

    READ = "read"
    WRITE = "write"
    BOTH = "both"


class EventKind(IntEnum):
    """Nostr event kinds that influence relay routing.

    Attributes:
        METADATA: Kind 0 -- user profile metadata (NIP-01).
        SHORT_TEXT_NOTE: Kind 1 -- plain note; replies to it are regular replies.
        CONTACTS: Kind 3 -- follow list (NIP-02).
        DISCUSSION: Kind 11 -- discussion thread root.
        PUBLIC_MESSAGE: Kind 24 -- message routed to recipients' inboxes.
        COMMENT: Kind 1111 -- NIP-22 comment.
        MUTE_LIST: Kind 10000 -- NIP-51 mute list.
        PIN_LIST: Kind 10001 -- NIP-51 pinned notes.
        RELAY_LIST: Kind 10002 -- NIP-65 relay list metadata.
        BOOKMARK_LIST: Kind 10003 -- NIP-51 bookmarks.
        BLOCKED_RELAYS: Kind 10006 -- NIP-51 blocked relays.
        FAVORITE_RELAYS: Kind 10012 -- NIP-51 favorite relays.
        INTERESTS_LIST: Kind 10015 -- NIP-51 interests.
        BLOSSOM_SERVER_LIST: Kind 10063 -- media server list.
        CACHE_RELAYS: Kind 10432 -- local/offline cache relay announcement.
        RELAY_SET: Kind 30002 -- NIP-51 named relay set.
        RELAY_REVIEW: Kind 31987 -- relay review.
    """

    METADATA = 0
    SHORT_TEXT_NOTE = 1
    CONTACTS = 3
    DISCUSSION = 11
    PUBLIC_MESSAGE = 24
    COMMENT = 1111
    MUTE_LIST = 10_000
    PIN_LIST = 10_001
    RELAY_LIST = 10_002
    BOOKMARK_LIST = 10_003
    BLOCKED_RELAYS = 10_006
    FAVORITE_RELAYS = 10_012
    INTERESTS_LIST = 10_015
    BLOSSOM_SERVER_LIST = 10_063
    CACHE_RELAYS = 10_432
    RELAY_SET = 30_002
    RELAY_REVIEW = 31_987


# Kinds whose publication also goes to profile and fast write relays, so
# that other clients can discover the user's lists.
LIST_KINDS: frozenset[int] = frozenset(
    {
        EventKind.METADATA,
        EventKind.CONTACTS,
        EventKind.RELAY_LIST,
        EventKind.FAVORITE_RELAYS,
        EventKind.BLOSSOM_SERVER_LIST,
        EventKind.RELAY_REVIEW,
        EventKind.BLOCKED_RELAYS,
        EventKind.PIN_LIST,
        EventKind.MUTE_LIST,
        EventKind.BOOKMARK_LIST,
        EventKind.INTERESTS_LIST,
    }
)

# Write-optimized relays used when the user has no write relays configured.
FAST_WRITE_RELAY_URLS: tuple[str, ...] = (
    "wss://relay.damus.io",
    "wss://relay.primal.net",
    "wss://thecitadel.nostr1.com",
    "wss://bevo.nostr1.com",
)

# Relays specialized in profile and list events.
PROFILE_RELAY_URLS: tuple[str, ...] = (
    "wss://purplepag.es",
    "wss://profiles.nostr1.com",
)
