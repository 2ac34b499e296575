"""
Prometheus metrics for the routing engine.

Module-level metric objects (singletons, thread-safe) recorded by the
services layer. Exposition (``/metrics`` endpoint, push gateway) is left to
the host application, which owns the process and its HTTP surface.

Architecture:
    RELAY_LIST_LOOKUPS:           Cache hits, misses and failed lookups.
    LOOKUP_FAILURES:              Failed fan-out lookups by lookup type.
    SELECTION_RULE_MATCHES:       Which selection rule fired.
    SELECTION_DURATION_SECONDS:   Histogram of ``select_relays`` latency.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram


RELAY_LIST_LOOKUPS = Counter(
    "relayrouter_relay_list_lookups",
    "Relay-list cache lookups by outcome",
    ["result"],
)

LOOKUP_FAILURES = Counter(
    "relayrouter_lookup_failures",
    "Fan-out lookups that failed and were skipped",
    ["lookup"],
)

SELECTION_RULE_MATCHES = Counter(
    "relayrouter_selection_rule_matches",
    "Selection rule that produced the default-selected relays",
    ["rule"],
)

SELECTION_DURATION_SECONDS = Histogram(
    "relayrouter_selection_duration_seconds",
    "Duration of a full relay selection in seconds",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
)
