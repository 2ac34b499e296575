"""User-curated named group of relays (NIP-51 kind 30002)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ._validation import validate_str_no_null


@dataclass(frozen=True, slots=True)
class RelaySet:
    """Named relay group owned by the user.

    Attributes:
        id: Stable identifier (the ``d`` tag of the source event).
        name: Display name.
        relay_urls: Relays in the set, in declaration order.
    """

    id: str
    name: str
    relay_urls: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_str_no_null(self.id, "id")
        validate_str_no_null(self.name, "name")
        object.__setattr__(self, "relay_urls", tuple(self.relay_urls))
