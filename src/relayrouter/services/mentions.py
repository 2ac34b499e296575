"""Who is mentioned by a draft and the event it answers.

[MentionExtractor][relayrouter.services.mentions.MentionExtractor] returns
the ordered, deduplicated public keys whose relays matter for routing:

1. the parent event's author,
2. every ``nostr:`` reference in the draft content, in order of appearance
   (profiles name their key; events name their author),
3. the ``p``/``P`` tags of the parent event.

A reference that fails to decode, or an event that cannot be fetched, is
logged and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relayrouter.core.logger import Logger
from relayrouter.core.metrics import LOOKUP_FAILURES
from relayrouter.models._validation import is_hex64
from relayrouter.nips.nip19 import find_mention_identifiers
from relayrouter.utils.gather import gather_outcomes


if TYPE_CHECKING:
    from relayrouter.models.event import Event

    from .collaborators import EventFetcher, Nip19Decoder


class MentionExtractor:
    """Extract mentioned public keys from draft content and its parent event.

    Args:
        decoder: Decodes bech32 mention identifiers.
        event_fetcher: Resolves mentioned events whose author is not embedded
            in the identifier.
        lookup_timeout: Per-event lookup timeout in seconds.
        logger: Structured logger; defaults to ``Logger("mentions")``.
    """

    def __init__(
        self,
        decoder: Nip19Decoder,
        event_fetcher: EventFetcher,
        *,
        lookup_timeout: float | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._decoder = decoder
        self._event_fetcher = event_fetcher
        self._lookup_timeout = lookup_timeout
        self._logger = logger or Logger("mentions")

    async def extract_mentions(
        self, content: str | None, parent_event: Event | None = None
    ) -> list[str]:
        """Return mentioned hex public keys, parent author first.

        Examples:
            ```python
            await extractor.extract_mentions(
                "cc nostr:npub1... and nostr:npub1...", parent_event=parent
            )
            # [parent.pubkey, first_npub_hex, second_npub_hex]
            ```
        """
        pubkeys: dict[str, None] = {}
        if parent_event is not None:
            pubkeys.setdefault(parent_event.pubkey, None)

        for pubkey in await self._content_mentions(content or ""):
            pubkeys.setdefault(pubkey, None)

        if parent_event is not None:
            for pubkey in parent_event.tag_values("p", "P"):
                if is_hex64(pubkey):
                    pubkeys.setdefault(pubkey, None)

        return list(pubkeys)

    async def _content_mentions(self, content: str) -> list[str]:
        # One slot per reference keeps content order across concurrent fetches
        slots: list[str | None] = []
        pending: dict[int, str] = {}

        for identifier in find_mention_identifiers(content):
            try:
                entity = self._decoder.decode(identifier)
            except Exception as e:  # Intentionally broad: decoder is pluggable
                self._logger.debug("mention_decode_failed", identifier=identifier, error=str(e))
                continue

            if entity.is_profile:
                slots.append(entity.data)
            elif entity.author is not None:
                slots.append(entity.author)
            else:
                pending[len(slots)] = entity.data
                slots.append(None)

        if pending:
            outcomes = await gather_outcomes(
                pending.items(),
                lambda item: self._event_fetcher.fetch_event(item[1]),
                timeout=self._lookup_timeout,
            )
            for outcome in outcomes:
                index, event_id = outcome.key
                if outcome.error is not None:
                    LOOKUP_FAILURES.labels(lookup="event").inc()
                    self._logger.warning(
                        "mention_event_fetch_failed", event_id=event_id, error=str(outcome.error)
                    )
                elif outcome.value is None:
                    self._logger.debug("mention_event_not_found", event_id=event_id)
                else:
                    slots[index] = outcome.value.pubkey

        return [pubkey for pubkey in slots if pubkey is not None]
