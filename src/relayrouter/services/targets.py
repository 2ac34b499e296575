"""Publish destinations for a signed event.

Where the selection engine proposes relays for a draft,
[PublishTargetResolver][relayrouter.services.targets.PublishTargetResolver]
decides where a finished event is actually sent:

- Discussions and comments sent with explicit relays go *only* there;
  [fallback_relays()][relayrouter.services.targets.PublishTargetResolver.fallback_relays]
  supplies the retry set when that single relay rejects the event.
- Other events sent with explicit relays use them as given.
- Otherwise: the sender's first write relays, the first read relays of
  every tagged recipient (except for discussion traffic), and, for profile
  and list kinds, well-known profile and write relays.

An empty result falls back to the configured fast write relays; blocked
relays are always removed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.models._validation import is_hex64
from relayrouter.models.constants import LIST_KINDS, EventKind, RelayScope
from relayrouter.models.relay import filter_blocked_relays, normalize_relay_urls
from relayrouter.utils.gather import flatten_unique

from .configs import PublishTargetsConfig
from .contextual import collect_users_relays


if TYPE_CHECKING:
    from collections.abc import Sequence

    from relayrouter.models.event import Event

    from .relay_list_cache import RelayListCache


_THREAD_KINDS: frozenset[int] = frozenset({EventKind.DISCUSSION, EventKind.COMMENT})
_DISCUSSION_KIND = str(int(EventKind.DISCUSSION))


def is_discussion_related(event: Event) -> bool:
    """Whether *event* is a discussion or a reply inside one."""
    return event.kind == EventKind.DISCUSSION or _DISCUSSION_KIND in event.tag_values("k")


class PublishTargetResolver:
    """Determine the relays a signed event is published to.

    Args:
        cache: Relay-list lookups for the sender and recipients.
        fallback_write_relays: Used when nothing else is available.
        config: Publish limits; defaults to
            [PublishTargetsConfig][relayrouter.services.configs.PublishTargetsConfig].
        lookup_timeout: Per-lookup timeout in seconds.
        logger: Structured logger; defaults to ``Logger("publish_targets")``.
    """

    def __init__(
        self,
        cache: RelayListCache,
        fallback_write_relays: Sequence[str],
        config: PublishTargetsConfig | None = None,
        *,
        lookup_timeout: float | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._cache = cache
        self._fallback_write_relays = tuple(fallback_write_relays)
        self._config = config or PublishTargetsConfig()
        self._lookup_timeout = lookup_timeout
        self._logger = logger or Logger("publish_targets")

    async def determine_target_relays(
        self,
        event: Event,
        *,
        user_pubkey: str | None,
        blocked_relays: Sequence[str] = (),
        specified_relays: Sequence[str] = (),
        additional_relays: Sequence[str] = (),
    ) -> list[str]:
        """Return the publish destinations of *event*.

        Args:
            event: The signed event.
            user_pubkey: The sender; ``None`` when signed out.
            blocked_relays: Relays never published to.
            specified_relays: Relays chosen explicitly by the user.
            additional_relays: Extra destinations merged into the automatic set.
        """
        if specified_relays and event.kind in _THREAD_KINDS:
            relays = filter_blocked_relays(normalize_relay_urls(specified_relays), blocked_relays)
            self._logger.debug("publish_targets_thread", event_id=event.id, relays=len(relays))
            return relays

        if specified_relays:
            relays = normalize_relay_urls(specified_relays)
        else:
            relays = await self._automatic_targets(event, user_pubkey, additional_relays)

        if not relays:
            relays = normalize_relay_urls(self._fallback_write_relays)

        relays = filter_blocked_relays(relays, blocked_relays)
        self._logger.debug("publish_targets_resolved", event_id=event.id, relays=len(relays))
        return relays

    async def _automatic_targets(
        self, event: Event, user_pubkey: str | None, additional_relays: Sequence[str]
    ) -> list[str]:
        extra: list[Sequence[str]] = [additional_relays]

        if not is_discussion_related(event) and self._config.recipient_read_limit > 0:
            recipients = [p for p in dict.fromkeys(event.tag_values("p", "P")) if is_hex64(p)]
            extra.append(
                await collect_users_relays(
                    self._cache,
                    recipients,
                    RelayScope.READ,
                    acting_user=user_pubkey,
                    logger=self._logger,
                    timeout=self._lookup_timeout,
                    limit=self._config.recipient_read_limit,
                )
            )

        if event.kind in LIST_KINDS:
            extra.append(self._config.profile_relays)
            extra.append(self._fallback_write_relays)

        sender: Sequence[str] = ()
        if user_pubkey is not None:
            relay_list = await self._cache.get_relay_list(user_pubkey)
            sender = relay_list.write[: self._config.sender_write_limit]

        return normalize_relay_urls(flatten_unique([sender, *extra]))

    async def fallback_relays(
        self, user_pubkey: str | None, blocked_relays: Sequence[str] = ()
    ) -> list[str]:
        """Retry destinations for a discussion reply whose hint relay failed."""
        relays: Sequence[str] = ()
        if user_pubkey is not None:
            relay_list = await self._cache.get_relay_list(user_pubkey)
            relays = relay_list.write[: self._config.fallback_write_limit]
        if not relays:
            relays = self._fallback_write_relays
        return filter_blocked_relays(normalize_relay_urls(relays), blocked_relays)
