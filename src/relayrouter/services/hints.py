"""Seen-on index of events.

Records which relays delivered which event so that replies can be routed
back to where the thread lives. The connection pool calls
[track_seen_on()][relayrouter.services.hints.EventHintTracker.track_seen_on]
for every event it receives; the routing engine reads the hints through the
[EventHintSource][relayrouter.services.collaborators.EventHintSource]
protocol.
"""

from __future__ import annotations

from collections import OrderedDict

from relayrouter.models.relay import normalize_relay_url


class EventHintTracker:
    """In-memory ``event_id -> relays`` index bounded to the most recent events.

    Args:
        max_events: Number of events kept; the least recently tracked event
            is evicted first.
    """

    def __init__(self, max_events: int = 10_000) -> None:
        if max_events < 1:
            raise ValueError("max_events must be positive")
        self._max_events = max_events
        self._seen_on: OrderedDict[str, dict[str, None]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen_on)

    def track_seen_on(self, event_id: str, relay_url: str) -> None:
        """Record that *event_id* was received from *relay_url*.

        Invalid relay URLs are ignored.
        """
        url = normalize_relay_url(relay_url)
        if url is None:
            return

        relays = self._seen_on.get(event_id)
        if relays is None:
            relays = {}
            self._seen_on[event_id] = relays
        self._seen_on.move_to_end(event_id)
        relays.setdefault(url, None)

        while len(self._seen_on) > self._max_events:
            self._seen_on.popitem(last=False)

    def get_event_hints(self, event_id: str) -> list[str]:
        """Relays *event_id* was seen on, in the order they were first seen."""
        return list(self._seen_on.get(event_id, ()))

    def get_event_hint(self, event_id: str) -> str | None:
        """First relay *event_id* was seen on, or ``None``."""
        hints = self.get_event_hints(event_id)
        return hints[0] if hints else None
