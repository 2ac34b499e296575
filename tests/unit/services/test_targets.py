"""
Unit tests for services.targets module.

Tests:
- is_discussion_related() detection
- Specified relays for thread kinds and other kinds
- Automatic targets: sender, recipients, profile/list kinds
- Fallback and blocked-relay handling
- fallback_relays() retry set
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from relayrouter.models import FAST_WRITE_RELAY_URLS, PROFILE_RELAY_URLS, Event, RelayList
from relayrouter.services.configs import PublishTargetsConfig
from relayrouter.services.relay_list_cache import RelayListCache
from relayrouter.services.targets import PublishTargetResolver, is_discussion_related
from tests.fixtures.collaborators import ALICE, BOB, CAROL, USER, FakeRelayListFetcher


SENDER_WRITE = tuple(f"wss://me-out{i}.relay" for i in range(1, 9))
FALLBACK = ("wss://fallback1.relay", "wss://fallback2.relay")


@pytest.fixture
def resolver(relay_lists: dict[str, RelayList]) -> PublishTargetResolver:
    lists = {**relay_lists, USER: RelayList(write=SENDER_WRITE, read=("wss://me-in.relay",))}
    return PublishTargetResolver(RelayListCache(FakeRelayListFetcher(lists)), FALLBACK)


class TestIsDiscussionRelated:
    """is_discussion_related()."""

    def test_discussion(self, make_event: Callable[..., Event]) -> None:
        """Test kind 11 is discussion traffic."""
        assert is_discussion_related(make_event(11))

    def test_reply_in_discussion(self, make_event: Callable[..., Event]) -> None:
        """Test a k tag naming kind 11 marks a discussion reply."""
        assert is_discussion_related(make_event(1111, tags=[["k", "11"]]))

    def test_note(self, make_event: Callable[..., Event]) -> None:
        """Test other events are not discussion traffic."""
        assert not is_discussion_related(make_event(1, tags=[["K", "11"]]))


class TestSpecifiedRelays:
    """Explicitly chosen relays."""

    async def test_thread_kind_only_specified(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test a discussion reply goes only to the chosen relay."""
        relays = await resolver.determine_target_relays(
            make_event(1111, pubkey=USER),
            user_pubkey=USER,
            specified_relays=["wss://Thread.relay/"],
            additional_relays=["wss://extra.relay"],
        )
        assert relays == ["wss://thread.relay"]

    async def test_thread_kind_blocked_gives_nothing(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test a blocked thread relay is not replaced by the fallback."""
        relays = await resolver.determine_target_relays(
            make_event(11, pubkey=USER),
            user_pubkey=USER,
            specified_relays=["wss://thread.relay"],
            blocked_relays=["wss://thread.relay"],
        )
        assert relays == []

    async def test_other_kind_uses_specified(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test specified relays replace the automatic set."""
        relays = await resolver.determine_target_relays(
            make_event(1, pubkey=USER, tags=[["p", BOB]]),
            user_pubkey=USER,
            specified_relays=["wss://a.relay", "wss://b.relay"],
            blocked_relays=["wss://b.relay"],
        )
        assert relays == ["wss://a.relay"]

    async def test_invalid_specified_falls_back(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test unusable specified relays fall back to the fast write relays."""
        relays = await resolver.determine_target_relays(
            make_event(1, pubkey=USER), user_pubkey=USER, specified_relays=["nope://x"]
        )
        assert relays == list(FALLBACK)


class TestAutomaticTargets:
    """Automatic destinations."""

    async def test_sender_limit(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test only the first six sender write relays are used."""
        relays = await resolver.determine_target_relays(make_event(1, pubkey=USER), user_pubkey=USER)
        assert relays == list(SENDER_WRITE[:6])

    async def test_recipients_read_relays(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test tagged recipients' inboxes are added, foreign LAN relays skipped."""
        event = make_event(1, pubkey=USER, tags=[["p", ALICE], ["P", BOB], ["p", "junk"]])
        relays = await resolver.determine_target_relays(
            event, user_pubkey=USER, additional_relays=["wss://extra.relay"]
        )
        assert relays == [
            *SENDER_WRITE[:6],
            "wss://extra.relay",
            "wss://alice-in1.relay",
            "wss://alice-in2.relay",
            "wss://alice-in3.relay",
            "wss://alice-in4.relay",
            "wss://bob-in.relay",
        ]

    async def test_discussion_skips_recipients(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test discussion traffic is not copied to recipients' inboxes."""
        event = make_event(1111, pubkey=USER, tags=[["k", "11"], ["p", CAROL]])
        relays = await resolver.determine_target_relays(event, user_pubkey=USER)
        assert "wss://carol-in.relay" not in relays

    async def test_recipient_limit_zero(
        self, relay_lists: dict[str, RelayList], make_event: Callable[..., Event]
    ) -> None:
        """Test a zero recipient limit disables recipient lookups."""
        fetcher = FakeRelayListFetcher(relay_lists)
        resolver = PublishTargetResolver(
            RelayListCache(fetcher), FALLBACK, PublishTargetsConfig(recipient_read_limit=0)
        )
        relays = await resolver.determine_target_relays(
            make_event(1, pubkey=USER, tags=[["p", BOB]]), user_pubkey=USER
        )
        assert relays == list(FALLBACK)
        assert BOB not in fetcher.calls

    async def test_list_kind_adds_profile_relays(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test follow lists also go to profile and fast write relays."""
        relays = await resolver.determine_target_relays(make_event(3, pubkey=USER), user_pubkey=USER)
        assert relays == [*SENDER_WRITE[:6], *PROFILE_RELAY_URLS, *FALLBACK]

    async def test_signed_out_falls_back(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test no sender and no recipients uses the fallback."""
        relays = await resolver.determine_target_relays(make_event(1), user_pubkey=None)
        assert relays == list(FALLBACK)

    async def test_blocked_removed(
        self, resolver: PublishTargetResolver, make_event: Callable[..., Event]
    ) -> None:
        """Test blocked relays are removed from automatic targets."""
        relays = await resolver.determine_target_relays(
            make_event(1, pubkey=USER), user_pubkey=USER, blocked_relays=[SENDER_WRITE[0]]
        )
        assert relays == list(SENDER_WRITE[1:6])


class TestFallbackRelays:
    """fallback_relays()."""

    async def test_first_write_relays(self, resolver: PublishTargetResolver) -> None:
        """Test the first three write relays are the retry set."""
        assert await resolver.fallback_relays(USER) == list(SENDER_WRITE[:3])

    async def test_unknown_user(self, resolver: PublishTargetResolver) -> None:
        """Test users without relays retry on the fast write relays."""
        assert await resolver.fallback_relays(None) == list(FALLBACK)

    async def test_blocked_filtered(self, resolver: PublishTargetResolver) -> None:
        """Test blocked relays are removed from the retry set."""
        assert await resolver.fallback_relays(USER, [SENDER_WRITE[1]]) == [
            SENDER_WRITE[0],
            SENDER_WRITE[2],
        ]

    async def test_default_fast_write_relays(self) -> None:
        """Test the built-in fast write relays can serve as fallback."""
        resolver = PublishTargetResolver(RelayListCache(FakeRelayListFetcher()), FAST_WRITE_RELAY_URLS)
        assert await resolver.fallback_relays("f" * 64) == list(FAST_WRITE_RELAY_URLS)
