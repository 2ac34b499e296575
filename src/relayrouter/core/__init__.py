"""Core layer: exceptions, structured logging, YAML loading, metrics.

Sits in the middle of the diamond DAG -- has no imports from other
relayrouter packages and is depended upon by ``relayrouter.nips`` and
``relayrouter.services``.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][relayrouter.core.logger.Logger].
    RelayRouterError: Root of the exception hierarchy.
        See [relayrouter.core.exceptions][].
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
    RELAY_LIST_LOOKUPS, LOOKUP_FAILURES, SELECTION_RULE_MATCHES,
    SELECTION_DURATION_SECONDS: Prometheus metrics recorded by services.
"""

from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    Nip19DecodeError,
    ProtocolError,
    RelayListParseError,
    RelayRouterError,
    RelayTimeoutError,
    StorageError,
)
from .logger import Logger, StructuredFormatter, configure_logging, format_kv_pairs
from .metrics import (
    LOOKUP_FAILURES,
    RELAY_LIST_LOOKUPS,
    SELECTION_DURATION_SECONDS,
    SELECTION_RULE_MATCHES,
)
from .yaml import load_yaml


__all__ = [
    "LOOKUP_FAILURES",
    "RELAY_LIST_LOOKUPS",
    "SELECTION_DURATION_SECONDS",
    "SELECTION_RULE_MATCHES",
    "ConfigurationError",
    "ConnectivityError",
    "Logger",
    "Nip19DecodeError",
    "ProtocolError",
    "RelayListParseError",
    "RelayRouterError",
    "RelayTimeoutError",
    "StorageError",
    "StructuredFormatter",
    "configure_logging",
    "format_kv_pairs",
    "load_yaml",
]
