"""Routing engine services.

Services are the top layer of the diamond DAG, depending on
[relayrouter.core][relayrouter.core], [relayrouter.nips][relayrouter.nips],
[relayrouter.utils][relayrouter.utils], and
[relayrouter.models][relayrouter.models].

```text
PublishContext
   |-> SelectableRelaySetBuilder -> ContextualRelayCollector -> RelayListCache
   |                                        |-> MentionExtractor
   '-> SelectedRelayResolver (ordered SelectionRule table)
                  = SelectionResult
```

Attributes:
    RelaySelectionService: Entry point computing a
        [SelectionResult][relayrouter.models.context.SelectionResult].
    PublishTargetResolver: Publish destinations of a signed event.
    RelayListCache: Store-first relay-list lookup.
    EventHintTracker: Seen-on index of events.
    NostrSdkFetcher: ``nostr_sdk`` network collaborator.
    RelaySelectionConfig: Pydantic configuration.

Examples:
    ```python
    from relayrouter.services import NostrSdkFetcher, create_relay_selection_service

    async with NostrSdkFetcher(["wss://purplepag.es"]) as fetcher:
        service = create_relay_selection_service(
            relay_list_fetcher=fetcher, event_fetcher=fetcher
        )
        result = await service.select_relays(context)
    ```
"""

from .collaborators import (
    EventFetcher,
    EventHintSource,
    Nip19Decoder,
    RelayListFetcher,
    RelayListStore,
)
from .configs import PublishTargetsConfig, RelaySelectionConfig
from .contextual import ContextualRelayCollector, collect_users_relays
from .hints import EventHintTracker
from .mentions import MentionExtractor
from .network import NostrSdkFetcher
from .relay_list_cache import InMemoryRelayListStore, RelayListCache
from .selectable import SelectableRelaySetBuilder
from .selected import Resolution, SelectedRelayResolver, SelectionRule
from .selection import RelaySelectionService, create_relay_selection_service, describe_selection
from .targets import PublishTargetResolver
from .threads import discussion_relay_hint, is_discussion_thread, is_threaded_comment


__all__ = [
    "ContextualRelayCollector",
    "EventFetcher",
    "EventHintSource",
    "EventHintTracker",
    "InMemoryRelayListStore",
    "MentionExtractor",
    "Nip19Decoder",
    "NostrSdkFetcher",
    "PublishTargetResolver",
    "PublishTargetsConfig",
    "RelayListCache",
    "RelayListFetcher",
    "RelayListStore",
    "RelaySelectionConfig",
    "RelaySelectionService",
    "Resolution",
    "SelectableRelaySetBuilder",
    "SelectedRelayResolver",
    "SelectionRule",
    "collect_users_relays",
    "create_relay_selection_service",
    "describe_selection",
    "discussion_relay_hint",
    "is_discussion_thread",
    "is_threaded_comment",
]
