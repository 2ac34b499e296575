"""Pure frozen dataclasses with zero I/O for relay routing.

The models layer is the foundation of the diamond DAG. It depends on no
other relayrouter package. Every model uses
``@dataclass(frozen=True, slots=True)``; validation happens in
``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    Relay: Normalized relay URL with network detection. Local relays are
        kept (they are the user's cache relays).
    Event: Read-only Nostr event with a ``nostr_sdk.Event`` adapter.
    RelayList: NIP-65 read/write relay list with cache-relay merging.
    RelaySet: User-curated named relay group.
    PublishContext: Input of a relay selection.
    SelectionResult: Output of a relay selection.

See Also:
    [relayrouter.models.relay][]: URL normalization and the local-network
        privacy predicate.
    [relayrouter.services][]: The routing engine built on these models.
"""

from .constants import (
    FAST_WRITE_RELAY_URLS,
    LIST_KINDS,
    PROFILE_RELAY_URLS,
    EventKind,
    NetworkType,
    RelayScope,
)
from .context import PublishContext, SelectionResult
from .event import Event
from .relay import (
    Relay,
    filter_blocked_relays,
    filter_foreign_local_relays,
    is_foreign_local_relay,
    is_local_network_url,
    is_valid_relay_url,
    normalize_relay_url,
    normalize_relay_urls,
    relay_hostname,
)
from .relay_list import RelayList, RelayListEntry
from .relay_set import RelaySet


__all__ = [
    "FAST_WRITE_RELAY_URLS",
    "LIST_KINDS",
    "PROFILE_RELAY_URLS",
    "Event",
    "EventKind",
    "NetworkType",
    "PublishContext",
    "Relay",
    "RelayList",
    "RelayListEntry",
    "RelayScope",
    "RelaySet",
    "SelectionResult",
    "filter_blocked_relays",
    "filter_foreign_local_relays",
    "is_foreign_local_relay",
    "is_local_network_url",
    "is_valid_relay_url",
    "normalize_relay_url",
    "normalize_relay_urls",
    "relay_hostname",
]
