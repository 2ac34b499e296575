"""
NIP-19 mention references.

Finds ``nostr:`` references in free text and decodes them into public keys
or event IDs. The bech32 codec itself is ``nostr_sdk``'s; this module only
maps its objects onto [Nip19Entity][relayrouter.nips.nip19.Nip19Entity] and
turns its errors into
[Nip19DecodeError][relayrouter.core.exceptions.Nip19DecodeError].

Only the four identifier types that can name a person are recognized:
``npub`` and ``nprofile`` (profiles), ``note`` and ``nevent`` (events, whose
author is the mentioned person). ``naddr`` and the secret-key types are
never treated as mentions.

Examples:
    ```python
    decoder = NostrSdkNip19Decoder()
    for identifier in find_mention_identifiers(content):
        entity = decoder.decode(identifier)
        entity.type    # Nip19Type.NPUB
        entity.data    # hex public key
    ```
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import NamedTuple

from nostr_sdk import EventId, Nip19Event, Nip19Profile, NostrSdkError, PublicKey

from relayrouter.core.exceptions import Nip19DecodeError


MENTION_PATTERN = re.compile(
    r"nostr:(npub1[a-z0-9]{58}|nprofile1[a-z0-9]+|note1[a-z0-9]{58}|nevent1[a-z0-9]+)"
)


class Nip19Type(StrEnum):
    """Bech32 identifier types recognized as mentions."""

    NPUB = "npub"
    NPROFILE = "nprofile"
    NOTE = "note"
    NEVENT = "nevent"


class Nip19Entity(NamedTuple):
    """Decoded mention identifier.

    Attributes:
        type: Identifier type.
        data: Hex public key for profiles, hex event ID for events.
        author: Hex author public key embedded in an ``nevent``, if any.
    """

    type: Nip19Type
    data: str
    author: str | None = None

    @property
    def is_profile(self) -> bool:
        return self.type in (Nip19Type.NPUB, Nip19Type.NPROFILE)


def find_mention_identifiers(content: str) -> list[str]:
    """Return the bech32 identifiers of every ``nostr:`` mention in *content*, in order."""
    if not content:
        return []
    return MENTION_PATTERN.findall(content)


class NostrSdkNip19Decoder:
    """Decode mention identifiers with ``nostr_sdk``.

    Implements the
    [Nip19Decoder][relayrouter.services.collaborators.Nip19Decoder] protocol.
    """

    def decode(self, identifier: str) -> Nip19Entity:
        """Decode *identifier*.

        Raises:
            Nip19DecodeError: If the identifier is malformed or not one of
                the supported mention types.
        """
        prefix = identifier.split("1", 1)[0]
        try:
            kind = Nip19Type(prefix)
        except ValueError:
            raise Nip19DecodeError(f"Unsupported NIP-19 type: {prefix!r}") from None

        try:
            if kind == Nip19Type.NPUB:
                return Nip19Entity(kind, PublicKey.parse(identifier).to_hex())
            if kind == Nip19Type.NPROFILE:
                profile = Nip19Profile.from_bech32(identifier)
                return Nip19Entity(kind, profile.public_key().to_hex())
            if kind == Nip19Type.NOTE:
                return Nip19Entity(kind, EventId.parse(identifier).to_hex())
            nevent = Nip19Event.from_bech32(identifier)
            author = nevent.author()
            return Nip19Entity(
                kind,
                nevent.event_id().to_hex(),
                author.to_hex() if author is not None else None,
            )
        except NostrSdkError as e:
            raise Nip19DecodeError(f"Invalid {kind} identifier: {e}") from e
