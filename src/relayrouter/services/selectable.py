"""The candidate pool offered to the user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.models.relay import filter_blocked_relays, normalize_relay_urls
from relayrouter.utils.gather import flatten_unique


if TYPE_CHECKING:
    from collections.abc import Sequence

    from relayrouter.models.context import PublishContext

    from .contextual import ContextualRelayCollector


class SelectableRelaySetBuilder:
    """Build the deduplicated, blocked-filtered set of selectable relays.

    Sources, in order:

    1. the user's write relays, or *fallback_write_relays* when there are none,
    2. the user's cache relays (kept even if the write list was replaced),
    3. favorite relays,
    4. every relay of every relay set,
    5. contextual relays when the action replies or composes a public message,
    6. relays explicitly requested through ``open_from``.

    Args:
        contextual: Collector for other users' relays.
        fallback_write_relays: Used when the user has no write relays.
        logger: Structured logger; defaults to ``Logger("selectable_relays")``.
    """

    def __init__(
        self,
        contextual: ContextualRelayCollector,
        fallback_write_relays: Sequence[str],
        logger: Logger | None = None,
    ) -> None:
        self._contextual = contextual
        self._fallback_write_relays = tuple(fallback_write_relays)
        self._logger = logger or Logger("selectable_relays")

    async def build(self, context: PublishContext) -> list[str]:
        groups: list[Sequence[str]] = [
            context.user_write_relays or self._fallback_write_relays,
            context.user_cache_relays,
            context.favorite_relays,
            *(relay_set.relay_urls for relay_set in context.relay_sets),
        ]
        if context.has_routing_context:
            groups.append(await self._contextual.collect(context))
        groups.append(context.open_from)

        relays = normalize_relay_urls(flatten_unique(groups))
        selectable = filter_blocked_relays(relays, context.blocked_relays)
        self._logger.debug(
            "selectable_relays_built", relays=len(selectable), blocked=len(relays) - len(selectable)
        )
        return selectable
