"""Relay selection entry point.

[RelaySelectionService][relayrouter.services.selection.RelaySelectionService]
combines the candidate pool
([SelectableRelaySetBuilder][relayrouter.services.selectable.SelectableRelaySetBuilder])
and the default selection
([SelectedRelayResolver][relayrouter.services.selected.SelectedRelayResolver])
into a [SelectionResult][relayrouter.models.context.SelectionResult].
Both halves are computed independently from the same
[PublishContext][relayrouter.models.context.PublishContext].

[create_relay_selection_service][relayrouter.services.selection.create_relay_selection_service]
wires the default collaborators.

Examples:
    ```python
    service = create_relay_selection_service(
        relay_list_fetcher=fetcher,
        event_fetcher=fetcher,
        config=RelaySelectionConfig.from_yaml("config/relayrouter.yaml"),
    )
    result = await service.select_relays(PublishContext(user_write_relays=write))
    result.description   # "2 relays"
    ```
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.core.metrics import SELECTION_DURATION_SECONDS, SELECTION_RULE_MATCHES
from relayrouter.models.context import SelectionResult
from relayrouter.models.relay import relay_hostname
from relayrouter.nips.nip19 import NostrSdkNip19Decoder

from .configs import RelaySelectionConfig
from .contextual import ContextualRelayCollector
from .hints import EventHintTracker
from .mentions import MentionExtractor
from .relay_list_cache import RelayListCache
from .selectable import SelectableRelaySetBuilder
from .selected import SelectedRelayResolver


if TYPE_CHECKING:
    from collections.abc import Sequence

    from relayrouter.models.context import PublishContext

    from .collaborators import (
        EventFetcher,
        EventHintSource,
        Nip19Decoder,
        RelayListFetcher,
        RelayListStore,
    )


def describe_selection(selected: Sequence[str]) -> str:
    """Summarize *selected* for display.

    Returns:
        ``"No relays selected"``, the relay's hostname when there is exactly
        one, otherwise ``"<n> relays"``.
    """
    if not selected:
        return "No relays selected"
    if len(selected) == 1:
        return relay_hostname(selected[0])
    return f"{len(selected)} relays"


class RelaySelectionService:
    """Compute selectable and selected relays for a publish action.

    Args:
        builder: Produces the candidate pool.
        resolver: Produces the default selection.
        logger: Structured logger; defaults to ``Logger("relay_selection")``.
    """

    def __init__(
        self,
        builder: SelectableRelaySetBuilder,
        resolver: SelectedRelayResolver,
        logger: Logger | None = None,
    ) -> None:
        self._builder = builder
        self._resolver = resolver
        self._logger = logger or Logger("relay_selection")

    @property
    def builder(self) -> SelectableRelaySetBuilder:
        return self._builder

    @property
    def resolver(self) -> SelectedRelayResolver:
        return self._resolver

    async def select_relays(self, context: PublishContext) -> SelectionResult:
        """Return the relays to offer and pre-select for *context*.

        Lookup failures degrade to fewer relays; an action with no usable
        relays yields empty lists and ``"No relays selected"``.
        """
        start = time.monotonic()
        # Builder first: the resolver then reads the relay lists it cached.
        selectable = await self._builder.build(context)
        resolution = await self._resolver.resolve_rule(context)
        elapsed = time.monotonic() - start

        SELECTION_RULE_MATCHES.labels(rule=resolution.rule).inc()
        SELECTION_DURATION_SECONDS.observe(elapsed)

        description = describe_selection(resolution.relays)
        self._logger.info(
            "relays_selected",
            rule=resolution.rule,
            selectable=len(selectable),
            selected=len(resolution.relays),
            duration_s=round(elapsed, 3),
        )
        return SelectionResult(
            selectable_relays=tuple(selectable),
            selected_relays=tuple(resolution.relays),
            description=description,
        )


def create_relay_selection_service(
    *,
    relay_list_fetcher: RelayListFetcher,
    event_fetcher: EventFetcher,
    hints: EventHintSource | None = None,
    decoder: Nip19Decoder | None = None,
    store: RelayListStore | None = None,
    config: RelaySelectionConfig | None = None,
) -> RelaySelectionService:
    """Wire a [RelaySelectionService][relayrouter.services.selection.RelaySelectionService].

    Args:
        relay_list_fetcher: Network source of relay lists.
        event_fetcher: Network source of mentioned events.
        hints: Seen-on hints; defaults to an empty
            [EventHintTracker][relayrouter.services.hints.EventHintTracker].
        decoder: NIP-19 decoder; defaults to
            [NostrSdkNip19Decoder][relayrouter.nips.nip19.NostrSdkNip19Decoder].
        store: Relay-list store; defaults to an in-memory store.
        config: Engine configuration; defaults to
            [RelaySelectionConfig][relayrouter.services.configs.RelaySelectionConfig]
            defaults.
    """
    config = config or RelaySelectionConfig()
    hints = hints if hints is not None else EventHintTracker()
    cache = RelayListCache(relay_list_fetcher, store, not_found_ttl=config.not_found_ttl)
    mentions = MentionExtractor(
        decoder or NostrSdkNip19Decoder(),
        event_fetcher,
        lookup_timeout=config.lookup_timeout,
    )
    contextual = ContextualRelayCollector(
        cache,
        mentions,
        hints,
        author_read_relay_limit=config.author_read_relay_limit,
        lookup_timeout=config.lookup_timeout,
    )
    builder = SelectableRelaySetBuilder(contextual, config.fallback_write_relays)
    resolver = SelectedRelayResolver(
        cache,
        mentions,
        hints,
        config.fallback_write_relays,
        lookup_timeout=config.lookup_timeout,
    )
    return RelaySelectionService(builder, resolver)
