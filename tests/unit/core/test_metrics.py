"""
Unit tests for core.metrics module.

Tests:
- Metric objects are registered with the expected names and labels
"""

from __future__ import annotations

from prometheus_client import REGISTRY

from relayrouter.core.metrics import (
    LOOKUP_FAILURES,
    RELAY_LIST_LOOKUPS,
    SELECTION_DURATION_SECONDS,
    SELECTION_RULE_MATCHES,
)


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:
    """Module-level Prometheus metrics."""

    def test_counters_increment(self) -> None:
        """Test labelled counters are exported under their names."""
        before = _sample("relayrouter_lookup_failures_total", {"lookup": "event"})
        LOOKUP_FAILURES.labels(lookup="event").inc()
        assert _sample("relayrouter_lookup_failures_total", {"lookup": "event"}) == before + 1

    def test_relay_list_lookups(self) -> None:
        """Test the cache lookup counter accepts result labels."""
        before = _sample("relayrouter_relay_list_lookups_total", {"result": "hit"})
        RELAY_LIST_LOOKUPS.labels(result="hit").inc()
        assert _sample("relayrouter_relay_list_lookups_total", {"result": "hit"}) == before + 1

    def test_rule_matches(self) -> None:
        """Test the rule counter accepts rule labels."""
        before = _sample("relayrouter_selection_rule_matches_total", {"rule": "default"})
        SELECTION_RULE_MATCHES.labels(rule="default").inc()
        assert _sample("relayrouter_selection_rule_matches_total", {"rule": "default"}) == before + 1

    def test_duration_histogram(self) -> None:
        """Test observations are counted."""
        before = _sample("relayrouter_selection_duration_seconds_count", {})
        SELECTION_DURATION_SECONDS.observe(0.02)
        assert _sample("relayrouter_selection_duration_seconds_count", {}) == before + 1
