"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so that routing decisions
can be logged as an event name plus key=value context, e.g.::

    relay_list_fetch_failed pubkey=3bf0c63f... error="connection refused"

Two output formats are supported: human-readable key=value pairs (default)
and single-line JSON for log aggregators. Values containing spaces, equals
signs, or quotes are escaped and wrapped in double quotes; long values are
truncated.

[StructuredFormatter][relayrouter.core.logger.StructuredFormatter] reads the
``structured_kv`` extra attached by [Logger][relayrouter.core.logger.Logger]
and also formats plain ``logging.getLogger()`` records from the models and
utils layers, so installing it on the root handler unifies all output.

Examples:
    ```python
    from relayrouter.core.logger import Logger

    logger = Logger("relay_selection")
    logger.info("selection_completed", rule="default", selected=2)
    # Output: selection_completed rule=default selected=2

    json_logger = Logger("relay_selection", json_output=True)
    json_logger.info("selection_completed", selected=2)
    # Output: {"timestamp": "...", "level": "info", ..., "selected": 2}
    ```
"""

import datetime
import json
import logging
from typing import Any, ClassVar


def _truncate(value: Any, max_value_length: int | None) -> str:
    s = str(value)
    if max_value_length and len(s) > max_value_length:
        s = s[:max_value_length] + f"...<truncated {len(s) - max_value_length} chars>"
    return s


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' pubkey=ab12 error="timed out"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = _truncate(v, max_value_length)
        # Quote values containing whitespace or characters that would break parsing
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Formats all log records as ``level name message key=value...``.

    Records without ``structured_kv`` (plain ``logging.getLogger()`` calls)
    are emitted with the same prefix for consistency. With
    ``json_output=True`` every record becomes one JSON object carrying the
    same fields as [Logger][relayrouter.core.logger.Logger]'s JSON mode.
    """

    def __init__(self, *, json_output: bool = False) -> None:
        super().__init__()
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if self._json_output:
            payload = {
                "timestamp": datetime.datetime.fromtimestamp(
                    record.created, datetime.UTC
                ).isoformat(),
                "level": record.levelname.lower(),
                "component": record.name,
                "message": record.getMessage(),
                **extra,
            }
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)

        base = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        if extra:
            base += format_kv_pairs(extra)
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Install a single root handler using the structured formatter.

    Use either this JSON mode or ``Logger(json_output=True)``, not both:
    the latter serializes the message before it reaches the handler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(json_output=json_output))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())


class Logger:
    """Structured logger that appends keyword arguments as extra fields.

    All public methods mirror the standard logging API with an added
    ``**kwargs`` parameter carrying the structured context.

    Examples:
        ```python
        logger = Logger("relay_list_cache")
        logger.warning("relay_list_fetch_failed", pubkey=pubkey, error=str(e))
        ```
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name, typically the component name. Maps to the
                underlying ``logging.getLogger(name)`` call.
            json_output: If True, emit JSON objects instead of key=value pairs.
            max_value_length: Maximum character length for individual values
                before truncation. Defaults to 1000.
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length

    @property
    def name(self) -> str:
        return self._logger.name

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "component": self._logger.name,
            "message": msg,
            **{k: _truncate(v, self._max_value_length) for k, v in kwargs.items()},
        }
        return json.dumps(record, default=str)

    def _make_extra(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        if not kwargs:
            return {}
        return {
            "structured_kv": {k: _truncate(v, self._max_value_length) for k, v in kwargs.items()}
        }

    def _log(self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if self._json_output:
            name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, name, kwargs), exc_info=exc_info)
        else:
            self._logger.log(level, msg, extra=self._make_extra(kwargs), exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG level message with optional key=value pairs."""
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO level message with optional key=value pairs."""
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING level message with optional key=value pairs."""
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with optional key=value pairs."""
        self._log(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with the active traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
