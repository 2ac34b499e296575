"""
Unit tests for nips.nip51 module.

Tests:
- relay_urls_from_event() for favorites and blocked relays
- relay_set_from_event() naming rules
- publish_context_from_events() assembly
"""

from __future__ import annotations

import pytest

from relayrouter.core.exceptions import ProtocolError
from relayrouter.models import Event, RelaySet
from relayrouter.nips.nip51 import (
    publish_context_from_events,
    relay_set_from_event,
    relay_urls_from_event,
)
from tests.fixtures.collaborators import ALICE, PARENT_ID, USER


def _event(kind: int, *tags: tuple[str, ...]) -> Event:
    return Event(id=PARENT_ID, pubkey=USER, kind=kind, tags=tags)


class TestRelayUrlsFromEvent:
    """relay_urls_from_event()."""

    def test_favorites(self) -> None:
        """Test relay tags are normalized in order."""
        event = _event(10012, ("relay", "wss://B.relay/"), ("p", ALICE), ("relay", "wss://a.relay"))
        assert relay_urls_from_event(event) == ["wss://b.relay", "wss://a.relay"]

    def test_blocked_drops_invalid(self) -> None:
        """Test unparseable relay tags are dropped."""
        assert relay_urls_from_event(_event(10006, ("relay", "nope://x"))) == []

    def test_wrong_kind(self) -> None:
        """Test other kinds raise ProtocolError."""
        with pytest.raises(ProtocolError):
            relay_urls_from_event(_event(10002))


class TestRelaySetFromEvent:
    """relay_set_from_event()."""

    def test_title_preferred(self) -> None:
        """Test the title tag names the set."""
        event = _event(
            30002,
            ("d", "work"),
            ("name", "Name"),
            ("title", "Title"),
            ("relay", "wss://a.relay"),
        )
        assert relay_set_from_event(event) == RelaySet(
            id="work", name="Title", relay_urls=("wss://a.relay",)
        )

    def test_name_fallback(self) -> None:
        """Test the name tag is used without a title."""
        assert relay_set_from_event(_event(30002, ("d", "work"), ("name", "Name"))).name == "Name"

    def test_identifier_fallback(self) -> None:
        """Test the d tag names the set without title or name."""
        assert relay_set_from_event(_event(30002, ("d", "work"), ("title", ""))).name == "work"

    def test_missing_d_tag(self) -> None:
        """Test a set without d tag raises ProtocolError."""
        with pytest.raises(ProtocolError, match="d tag"):
            relay_set_from_event(_event(30002, ("relay", "wss://a.relay")))

    def test_wrong_kind(self) -> None:
        """Test other kinds raise ProtocolError."""
        with pytest.raises(ProtocolError):
            relay_set_from_event(_event(10012, ("d", "x")))


class TestPublishContextFromEvents:
    """publish_context_from_events()."""

    def test_assembles_context(self) -> None:
        """Test every list event feeds its context field."""
        ctx = publish_context_from_events(
            USER,
            relay_list_event=_event(
                10002, ("r", "wss://out.relay", "write"), ("r", "wss://in.relay", "read")
            ),
            cache_relays_event=_event(10432, ("r", "ws://192.168.1.2")),
            favorite_relays_event=_event(10012, ("relay", "wss://fav.relay")),
            blocked_relays_event=_event(10006, ("relay", "wss://bad.relay")),
            relay_set_events=[_event(30002, ("d", "work"), ("relay", "wss://set.relay"))],
            content="hello",
        )
        assert ctx.user_pubkey == USER
        assert ctx.user_write_relays == ("ws://192.168.1.2", "wss://out.relay")
        assert ctx.user_read_relays == ("ws://192.168.1.2", "wss://in.relay")
        assert ctx.user_cache_relays == ("ws://192.168.1.2",)
        assert ctx.favorite_relays == ("wss://fav.relay",)
        assert ctx.blocked_relays == ("wss://bad.relay",)
        assert ctx.relay_sets[0].relay_urls == ("wss://set.relay",)
        assert ctx.content == "hello"

    def test_cache_relays_without_relay_list(self) -> None:
        """Test cache relays alone still populate the user's relays."""
        ctx = publish_context_from_events(
            USER, cache_relays_event=_event(10432, ("r", "ws://localhost:4869"))
        )
        assert ctx.user_write_relays == ("ws://localhost:4869",)

    def test_no_events(self) -> None:
        """Test an empty context when the user has no lists."""
        ctx = publish_context_from_events(USER)
        assert ctx.user_write_relays == ()
        assert ctx.relay_sets == ()
