"""
Immutable Nostr event as seen by the routing engine.

The engine only reads events (the parent of a reply, a referenced note, a
relay-list event); it never signs or verifies them. The model therefore
keeps the plain NIP-01 fields and offers
[from_nostr()][relayrouter.models.event.Event.from_nostr] to adapt a
``nostr_sdk.Event`` coming from the network layer.

See Also:
    [relayrouter.nips.nip65][]: Parses relay-list events into
        [RelayList][relayrouter.models.relay_list.RelayList].
    [relayrouter.services.selected][]: Dispatches selection rules on the
        parent event's kind and tags.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ._validation import validate_hex64, validate_str_no_null, validate_timestamp


if TYPE_CHECKING:
    from nostr_sdk import Event as NostrEvent


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable Nostr event.

    Tags are stored as a tuple of tuples so the instance is hashable and
    cannot be mutated after validation.

    Attributes:
        id: Event ID as 64-char hex.
        pubkey: Author public key as 64-char hex.
        kind: Integer event kind.
        tags: Tag arrays, e.g. ``(("e", "<id>", "wss://hint"), ("p", "<pk>"))``.
        content: Raw content string.
        created_at: Unix timestamp of creation.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If ``id``/``pubkey`` are not hex, the kind is out of
            range, or content/tags contain null bytes.
    """

    id: str
    pubkey: str
    kind: int
    tags: tuple[tuple[str, ...], ...] = field(default_factory=tuple)
    content: str = ""
    created_at: int = 0

    def __post_init__(self) -> None:
        validate_hex64(self.id, "id")
        validate_hex64(self.pubkey, "pubkey")
        validate_timestamp(self.kind, "kind")
        if self.kind > 65_535:
            raise ValueError("kind must be at most 65535")
        validate_str_no_null(self.content, "content")
        validate_timestamp(self.created_at, "created_at")

        tags = tuple(tuple(tag) for tag in self.tags)
        for tag in tags:
            for value in tag:
                validate_str_no_null(value, "tags")
        object.__setattr__(self, "tags", tags)

    def tag_values(self, *names: str) -> list[str]:
        """Return the first value of every tag whose name is in *names*."""
        return [tag[1] for tag in self.tags if len(tag) > 1 and tag[0] in names]

    def find_tag(self, name: str) -> tuple[str, ...] | None:
        """Return the first tag named *name*, or ``None``."""
        for tag in self.tags:
            if tag and tag[0] == name:
                return tag
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        """Build an event from a NIP-01 JSON object (extra keys such as ``sig`` are ignored)."""
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            kind=data["kind"],
            tags=tuple(tuple(tag) for tag in data.get("tags", ())),
            content=data.get("content", ""),
            created_at=data.get("created_at", 0),
        )

    @classmethod
    def from_nostr(cls, event: NostrEvent) -> Event:
        """Adapt a ``nostr_sdk.Event`` into the engine's model."""
        return cls(
            id=event.id().to_hex(),
            pubkey=event.author().to_hex(),
            kind=event.kind().as_u16(),
            tags=tuple(tuple(tag.as_vec()) for tag in event.tags().to_vec()),
            content=event.content(),
            created_at=event.created_at().as_secs(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON representation (without signature)."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
        }
