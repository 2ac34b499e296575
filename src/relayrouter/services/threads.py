"""Discussion-thread detection and relay hints.

Discussions (kind 11) live on a single relay. Replies to them, and
comments (kind 1111) inside them, must go back to that relay. The relay is
known from:

- the seen-on hints of a kind 11 root (first relay it was seen on), or
- the relay hint of a threaded comment's ``E`` (root) or ``e`` (parent) tag.

A kind 1111 comment counts as threaded when it carries such a hint or a
``K``/``k`` tag naming kind 11; any other comment is an ordinary reply.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relayrouter.models.constants import EventKind
from relayrouter.models.relay import normalize_relay_url


if TYPE_CHECKING:
    from relayrouter.models.event import Event

    from .collaborators import EventHintSource


_DISCUSSION_KIND = str(int(EventKind.DISCUSSION))


def comment_relay_hint(event: Event) -> str | None:
    """Normalized relay hint of a comment's ``E`` tag, else its ``e`` tag."""
    for name in ("E", "e"):
        tag = event.find_tag(name)
        if tag is not None and len(tag) > 2 and tag[2]:
            return normalize_relay_url(tag[2])
    return None


def is_threaded_comment(event: Event) -> bool:
    """Whether *event* is a kind 1111 comment inside a discussion thread."""
    if event.kind != EventKind.COMMENT:
        return False
    if comment_relay_hint(event) is not None:
        return True
    return _DISCUSSION_KIND in event.tag_values("K", "k")


def is_discussion_thread(event: Event | None) -> bool:
    """Whether replies to *event* belong to a discussion thread."""
    if event is None:
        return False
    return event.kind == EventKind.DISCUSSION or is_threaded_comment(event)


def discussion_relay_hint(event: Event, hints: EventHintSource) -> str | None:
    """The single relay a discussion reply should go to, if known."""
    if event.kind == EventKind.DISCUSSION:
        for url in hints.get_event_hints(event.id):
            normalized = normalize_relay_url(url)
            if normalized is not None:
                return normalized
        return None
    if event.kind == EventKind.COMMENT:
        return comment_relay_hint(event)
    return None
