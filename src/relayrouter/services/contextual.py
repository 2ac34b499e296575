"""Relays of the people an action involves.

[ContextualRelayCollector][relayrouter.services.contextual.ContextualRelayCollector]
adds other users' relays to the candidate pool when the action replies to
an event or composes a public message. Other users' local-network relays
are never included: they are reachable only from that user's own network.

[collect_users_relays][relayrouter.services.contextual.collect_users_relays]
is the shared fan-out step also used by the selection rules.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.core.metrics import LOOKUP_FAILURES
from relayrouter.models.constants import RelayScope
from relayrouter.models.relay import filter_foreign_local_relays, normalize_relay_urls
from relayrouter.utils.gather import collect_with_partial_failure, flatten_unique

from .threads import discussion_relay_hint, is_discussion_thread


if TYPE_CHECKING:
    from collections.abc import Iterable

    from relayrouter.models.context import PublishContext
    from relayrouter.models.relay_list import RelayList

    from .collaborators import EventHintSource
    from .mentions import MentionExtractor
    from .relay_list_cache import RelayListCache


async def collect_users_relays(
    cache: RelayListCache,
    pubkeys: Iterable[str],
    scope: RelayScope,
    *,
    acting_user: str | None,
    logger: Logger,
    timeout: float | None = None,
    limit: int | None = None,
) -> list[str]:
    """Fetch the *scope* relays of every pubkey concurrently.

    Foreign local relays are removed per user before *limit* is applied.
    A failed lookup contributes nothing.

    Returns:
        Ordered, deduplicated relay URLs.
    """

    async def lookup(pubkey: str) -> list[str]:
        relay_list: RelayList = await cache.get_relay_list(pubkey)
        relays = filter_foreign_local_relays(relay_list.relays_for(scope), pubkey, acting_user)
        return relays if limit is None else relays[:limit]

    def on_failure(pubkey: str, error: Exception) -> None:
        LOOKUP_FAILURES.labels(lookup="relay_list").inc()
        logger.warning("relay_list_lookup_failed", pubkey=pubkey, error=str(error))

    groups = await collect_with_partial_failure(
        pubkeys, lookup, timeout=timeout, on_failure=on_failure
    )
    return normalize_relay_urls(flatten_unique(groups))


class ContextualRelayCollector:
    """Collect relays derived from the parent event and mentioned users.

    Args:
        cache: Relay-list lookups.
        mentions: Mention extraction for the draft.
        hints: Seen-on hints of events.
        author_read_relay_limit: Parent-author read relays included.
        lookup_timeout: Per-lookup timeout in seconds.
        logger: Structured logger; defaults to ``Logger("contextual_relays")``.
    """

    def __init__(
        self,
        cache: RelayListCache,
        mentions: MentionExtractor,
        hints: EventHintSource,
        *,
        author_read_relay_limit: int = 4,
        lookup_timeout: float | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._cache = cache
        self._mentions = mentions
        self._hints = hints
        self._author_read_relay_limit = author_read_relay_limit
        self._lookup_timeout = lookup_timeout
        self._logger = logger or Logger("contextual_relays")

    async def collect(self, context: PublishContext) -> list[str]:
        """Return contextual candidate relays; empty for a plain post.

        In order: the parent author's read relays, the parent's seen-on
        and discussion hints, then every mentioned user's write relays
        (read relays for public messages). The author lookup and the
        mention lookups run concurrently.
        """
        if not context.has_routing_context:
            return []

        parent = context.parent_event
        author_relays, (mentioned, mention_relays) = await asyncio.gather(
            self._author_relays(context),
            self._mentioned_relays(context),
        )

        groups: list[list[str]] = [author_relays]
        if parent is not None:
            groups.append(normalize_relay_urls(self._hints.get_event_hints(parent.id)))
            if is_discussion_thread(parent):
                hint = discussion_relay_hint(parent, self._hints)
                if hint is not None:
                    groups.append([hint])
        groups.append(mention_relays)

        relays = flatten_unique(groups)
        self._logger.debug("contextual_relays_collected", relays=len(relays), mentions=len(mentioned))
        return relays

    async def _author_relays(self, context: PublishContext) -> list[str]:
        if context.parent_event is None:
            return []
        return await collect_users_relays(
            self._cache,
            [context.parent_event.pubkey],
            RelayScope.READ,
            acting_user=context.user_pubkey,
            logger=self._logger,
            timeout=self._lookup_timeout,
            limit=self._author_read_relay_limit,
        )

    async def _mentioned_relays(self, context: PublishContext) -> tuple[list[str], list[str]]:
        mentioned = [
            pubkey
            for pubkey in await self._mentions.extract_mentions(
                context.content, context.parent_event
            )
            if pubkey != context.user_pubkey
        ]
        scope = RelayScope.READ if context.targets_public_message else RelayScope.WRITE
        relays = await collect_users_relays(
            self._cache,
            mentioned,
            scope,
            acting_user=context.user_pubkey,
            logger=self._logger,
            timeout=self._lookup_timeout,
        )
        return mentioned, relays
