"""Default-selected relays.

[SelectedRelayResolver][relayrouter.services.selected.SelectedRelayResolver]
decides which of the selectable relays start checked. The decision is an
ordered table of [SelectionRule][relayrouter.services.selected.SelectionRule]
entries evaluated top to bottom; the first rule whose predicate matches
produces the relays:

| Rule                | Matches                                    | Relays                                 |
|---------------------|--------------------------------------------|----------------------------------------|
| `explicit_override` | ``open_from`` is non-empty                 | ``open_from``                          |
| `discussion_thread` | parent is a discussion or threaded comment | the thread's relay hint, or nothing    |
| `public_message`    | composing or answering a public message    | own outbox + recipients' inboxes       |
| `regular_reply`     | parent is a note or an ordinary comment    | own outbox + mentioned users' outboxes |
| `default`           | always                                     | own outbox                             |

"Own outbox" falls back to the configured fast write relays when the user
has no write relays. The user's cache relays are appended to every result,
then blocked relays are removed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, NamedTuple

from relayrouter.core.logger import Logger
from relayrouter.models.constants import EventKind, RelayScope
from relayrouter.models.relay import filter_blocked_relays, normalize_relay_urls
from relayrouter.utils.gather import flatten_unique

from .contextual import collect_users_relays
from .threads import discussion_relay_hint, is_discussion_thread


if TYPE_CHECKING:
    from relayrouter.models.context import PublishContext

    from .collaborators import EventHintSource
    from .mentions import MentionExtractor
    from .relay_list_cache import RelayListCache


class SelectionRule(NamedTuple):
    """One row of the selection table.

    Attributes:
        name: Stable rule identifier, used in logs and metrics.
        matches: Predicate over the publish context.
        select: Coroutine producing the rule's relays.
    """

    name: str
    matches: Callable[[PublishContext], bool]
    select: Callable[[PublishContext], Awaitable[list[str]]]


class Resolution(NamedTuple):
    """Selected relays and the rule that produced them."""

    rule: str
    relays: list[str]


_REPLY_KINDS: frozenset[int] = frozenset({EventKind.SHORT_TEXT_NOTE, EventKind.COMMENT})


class SelectedRelayResolver:
    """Resolve the default-selected relays of a publish action.

    Args:
        cache: Relay-list lookups for mentioned users.
        mentions: Mention extraction for the draft.
        hints: Seen-on hints, used for discussion roots.
        fallback_write_relays: Used when the user has no write relays.
        lookup_timeout: Per-lookup timeout in seconds.
        logger: Structured logger; defaults to ``Logger("selected_relays")``.

    Attributes:
        rules: The selection table, in evaluation order. The last rule
            always matches.
    """

    def __init__(
        self,
        cache: RelayListCache,
        mentions: MentionExtractor,
        hints: EventHintSource,
        fallback_write_relays: Sequence[str],
        *,
        lookup_timeout: float | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._cache = cache
        self._mentions = mentions
        self._hints = hints
        self._fallback_write_relays = tuple(fallback_write_relays)
        self._lookup_timeout = lookup_timeout
        self._logger = logger or Logger("selected_relays")
        self.rules: tuple[SelectionRule, ...] = (
            SelectionRule("explicit_override", self._is_explicit, self._select_explicit),
            SelectionRule("discussion_thread", self._is_discussion, self._select_discussion),
            SelectionRule("public_message", self._is_public_message, self._select_public_message),
            SelectionRule("regular_reply", self._is_regular_reply, self._select_regular_reply),
            SelectionRule("default", self._always, self._select_outbox),
        )

    async def resolve(self, context: PublishContext) -> list[str]:
        """Return the default-selected relays."""
        return (await self.resolve_rule(context)).relays

    async def resolve_rule(self, context: PublishContext) -> Resolution:
        """Return the default-selected relays with the name of the matching rule."""
        rule = next(rule for rule in self.rules if rule.matches(context))
        relays = await rule.select(context)

        relays = normalize_relay_urls(flatten_unique([relays, context.user_cache_relays]))
        relays = filter_blocked_relays(relays, context.blocked_relays)
        self._logger.debug("selection_rule_matched", rule=rule.name, relays=len(relays))
        return Resolution(rule.name, relays)

    # -- predicates ---------------------------------------------------------

    @staticmethod
    def _always(context: PublishContext) -> bool:
        return True

    @staticmethod
    def _is_explicit(context: PublishContext) -> bool:
        return bool(context.open_from)

    @staticmethod
    def _is_discussion(context: PublishContext) -> bool:
        return is_discussion_thread(context.parent_event)

    @staticmethod
    def _is_public_message(context: PublishContext) -> bool:
        return context.targets_public_message

    @staticmethod
    def _is_regular_reply(context: PublishContext) -> bool:
        return context.parent_kind in _REPLY_KINDS

    # -- selectors ----------------------------------------------------------

    async def _select_explicit(self, context: PublishContext) -> list[str]:
        return normalize_relay_urls(context.open_from)

    async def _select_discussion(self, context: PublishContext) -> list[str]:
        parent = context.parent_event
        hint = discussion_relay_hint(parent, self._hints) if parent is not None else None
        if hint is None:
            self._logger.debug("discussion_hint_missing", event_id=parent.id if parent else None)
            return []
        return [hint]

    async def _select_outbox(self, context: PublishContext) -> list[str]:
        return normalize_relay_urls(context.user_write_relays or self._fallback_write_relays)

    async def _mentioned_relays(self, context: PublishContext, scope: RelayScope) -> list[str]:
        pubkeys = await self._mentions.extract_mentions(context.content, context.parent_event)
        return await self._users_relays(context, pubkeys, scope)

    async def _users_relays(
        self, context: PublishContext, pubkeys: Sequence[str], scope: RelayScope
    ) -> list[str]:
        return await collect_users_relays(
            self._cache,
            [pubkey for pubkey in pubkeys if pubkey != context.user_pubkey],
            scope,
            acting_user=context.user_pubkey,
            logger=self._logger,
            timeout=self._lookup_timeout,
        )

    async def _select_public_message(self, context: PublishContext) -> list[str]:
        outbox = await self._select_outbox(context)
        if context.is_public_message:
            inboxes = await self._mentioned_relays(context, RelayScope.READ)
        elif context.parent_event is not None:
            # Answering without composing: reach the original sender's inbox
            senders = [context.parent_event.pubkey]
            inboxes = await self._users_relays(context, senders, RelayScope.READ)
        else:
            inboxes = []
        return flatten_unique([outbox, inboxes])

    async def _select_regular_reply(self, context: PublishContext) -> list[str]:
        outbox = await self._select_outbox(context)
        mentioned = await self._mentioned_relays(context, RelayScope.WRITE)
        return flatten_unique([outbox, mentioned])
