"""
Unit tests for core.logger module.

Tests:
- format_kv_pairs() quoting and truncation
- Logger key=value and JSON output
- StructuredFormatter text and JSON modes
- configure_logging() root handler installation
"""

from __future__ import annotations

import json
import logging

import pytest

from relayrouter.core.logger import (
    Logger,
    StructuredFormatter,
    configure_logging,
    format_kv_pairs,
)


class TestFormatKvPairs:
    """format_kv_pairs()."""

    def test_empty(self) -> None:
        """Test no pairs yields an empty string."""
        assert format_kv_pairs({}) == ""

    def test_simple(self) -> None:
        """Test plain values are not quoted."""
        assert format_kv_pairs({"rule": "default", "selected": 2}) == " rule=default selected=2"

    def test_quoting(self) -> None:
        """Test values with spaces, equals or quotes are quoted and escaped."""
        out = format_kv_pairs({"error": 'said "no" here', "expr": "a=b", "blank": ""}, prefix="")
        assert out == 'error="said \\"no\\" here" expr="a=b" blank=""'

    def test_truncation(self) -> None:
        """Test long values are truncated with a marker."""
        out = format_kv_pairs({"v": "x" * 20}, max_value_length=5, prefix="")
        assert out == "v=xxxxx...<truncated 15 chars>"

    def test_truncation_disabled(self) -> None:
        """Test None disables truncation."""
        assert format_kv_pairs({"v": "x" * 2000}, max_value_length=None, prefix="") == "v=" + "x" * 2000


class TestLogger:
    """Logger wrapper."""

    def test_name(self) -> None:
        """Test the name maps to the stdlib logger."""
        assert Logger("relay_list_cache").name == "relay_list_cache"

    def test_kv_attached_as_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test keyword arguments are attached as structured_kv."""
        with caplog.at_level(logging.INFO, logger="test_kv"):
            Logger("test_kv").info("relays_selected", rule="default", selected=2)
        record = caplog.records[-1]
        assert record.getMessage() == "relays_selected"
        assert record.structured_kv == {"rule": "default", "selected": "2"}  # type: ignore[attr-defined]

    def test_values_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test values longer than max_value_length are truncated."""
        with caplog.at_level(logging.INFO, logger="test_trunc"):
            Logger("test_trunc", max_value_length=3).info("evt", value="abcdef")
        assert caplog.records[-1].structured_kv["value"].startswith("abc...")  # type: ignore[attr-defined]

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test JSON mode serializes the whole record into the message."""
        with caplog.at_level(logging.WARNING, logger="test_json"):
            Logger("test_json", json_output=True).warning("lookup_failed", pubkey="ab")
        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["level"] == "warning"
        assert payload["component"] == "test_json"
        assert payload["message"] == "lookup_failed"
        assert payload["pubkey"] == "ab"

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test records below the logger level are not emitted."""
        with caplog.at_level(logging.ERROR, logger="test_level"):
            Logger("test_level").debug("noise", x=1)
        assert not [r for r in caplog.records if r.name == "test_level"]

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test exception() logs at ERROR with exc_info."""
        with caplog.at_level(logging.ERROR, logger="test_exc"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                Logger("test_exc").exception("failed", step="fetch")
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None


class TestStructuredFormatter:
    """StructuredFormatter."""

    @staticmethod
    def _record(**kv: str) -> logging.LogRecord:
        record = logging.LogRecord("cache", logging.WARNING, __file__, 1, "fetch_failed", None, None)
        if kv:
            record.structured_kv = kv
        return record

    def test_text(self) -> None:
        """Test text mode renders level, name, message and pairs."""
        out = StructuredFormatter().format(self._record(pubkey="ab"))
        assert out == "warning cache fetch_failed pubkey=ab"

    def test_plain_record(self) -> None:
        """Test records without structured_kv get the same prefix."""
        assert StructuredFormatter().format(self._record()) == "warning cache fetch_failed"

    def test_json(self) -> None:
        """Test JSON mode emits one object with the structured fields."""
        payload = json.loads(StructuredFormatter(json_output=True).format(self._record(pubkey="ab")))
        assert payload["level"] == "warning"
        assert payload["component"] == "cache"
        assert payload["message"] == "fetch_failed"
        assert payload["pubkey"] == "ab"
        assert "timestamp" in payload


class TestConfigureLogging:
    """configure_logging()."""

    def test_installs_single_handler(self) -> None:
        """Test the root logger ends up with one structured handler."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            configure_logging("debug", json_output=True)
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
