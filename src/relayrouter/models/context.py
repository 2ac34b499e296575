"""
Input and output of a relay selection.

[PublishContext][relayrouter.models.context.PublishContext] is constructed
fresh for every action and never persisted;
[SelectionResult][relayrouter.models.context.SelectionResult] is what the
compose UI and the publish pipeline consume.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .constants import EventKind
from .event import Event
from .relay import is_local_network_url
from .relay_set import RelaySet


@dataclass(frozen=True, slots=True)
class PublishContext:
    """Everything the engine needs to know about one publish action.

    Attributes:
        user_write_relays: The acting user's outbox relays, cache relays included.
        user_read_relays: The acting user's inbox relays.
        favorite_relays: Relays the user marked as favorites.
        blocked_relays: Relays that must never be suggested or selected.
        relay_sets: User-curated relay groups.
        parent_event: Event being replied or reacted to, if any.
        is_public_message: Whether the action composes a public message.
        content: Draft content, scanned for mentions.
        user_pubkey: Hex public key of the acting user.
        open_from: Relays explicitly requested by the caller; overrides every
            other selection rule.
    """

    user_write_relays: tuple[str, ...] = field(default_factory=tuple)
    user_read_relays: tuple[str, ...] = field(default_factory=tuple)
    favorite_relays: tuple[str, ...] = field(default_factory=tuple)
    blocked_relays: tuple[str, ...] = field(default_factory=tuple)
    relay_sets: tuple[RelaySet, ...] = field(default_factory=tuple)
    parent_event: Event | None = None
    is_public_message: bool = False
    content: str | None = None
    user_pubkey: str | None = None
    open_from: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable from callers, store tuples
        for name in (
            "user_write_relays",
            "user_read_relays",
            "favorite_relays",
            "blocked_relays",
            "relay_sets",
            "open_from",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

    @property
    def parent_kind(self) -> int | None:
        return self.parent_event.kind if self.parent_event is not None else None

    @property
    def targets_public_message(self) -> bool:
        """Whether the action composes or answers a public message."""
        return self.is_public_message or self.parent_kind == EventKind.PUBLIC_MESSAGE

    @property
    def user_cache_relays(self) -> tuple[str, ...]:
        """The acting user's local-network (cache) write relays."""
        return tuple(url for url in self.user_write_relays if is_local_network_url(url))

    @property
    def has_routing_context(self) -> bool:
        """Whether contextual (other users') relays apply to this action."""
        return self.parent_event is not None or self.is_public_message

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PublishContext:
        """Build a context from plain data (YAML/JSON fixtures, API payloads)."""
        parent = data.get("parent_event")
        return cls(
            user_write_relays=tuple(data.get("user_write_relays", ())),
            user_read_relays=tuple(data.get("user_read_relays", ())),
            favorite_relays=tuple(data.get("favorite_relays", ())),
            blocked_relays=tuple(data.get("blocked_relays", ())),
            relay_sets=tuple(
                RelaySet(
                    id=item["id"],
                    name=item.get("name", item["id"]),
                    relay_urls=tuple(item.get("relay_urls", ())),
                )
                for item in data.get("relay_sets", ())
            ),
            parent_event=Event.from_dict(parent) if parent else None,
            is_public_message=bool(data.get("is_public_message", False)),
            content=data.get("content"),
            user_pubkey=data.get("user_pubkey"),
            open_from=tuple(data.get("open_from", ())),
        )


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Relays offered to and pre-selected for the user.

    Attributes:
        selectable_relays: Candidate pool, deduplicated and blocked-filtered.
        selected_relays: Default-checked relays, blocked-filtered.
        description: Human-readable summary of ``selected_relays``.
    """

    selectable_relays: tuple[str, ...]
    selected_relays: tuple[str, ...]
    description: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "selectable_relays", tuple(self.selectable_relays))
        object.__setattr__(self, "selected_relays", tuple(self.selected_relays))

    def to_dict(self) -> dict[str, Any]:
        return {
            "selectable_relays": list(self.selectable_relays),
            "selected_relays": list(self.selected_relays),
            "description": self.description,
        }
