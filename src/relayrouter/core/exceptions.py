"""relayrouter exception hierarchy.

Provides typed exceptions for every error category so the engine can tell
malformed input and transient lookups apart from configuration mistakes.
The selection entry point never lets these escape: lookups that raise are
degraded to "no relays from this source". They do surface from
configuration loading and from the network adapter.

Exception hierarchy:

```text
RelayRouterError (base -- never raised directly)
├── ConfigurationError      -- config validation, missing keys, bad YAML
├── ConnectivityError       -- relay unreachable, fetch failed
│   └── RelayTimeoutError   -- fetch timed out
├── ProtocolError           -- NIP parsing/validation failures
│   ├── Nip19DecodeError    -- malformed or unsupported bech32 identifier
│   └── RelayListParseError -- relay-list event of the wrong shape
└── StorageError            -- relay-list store read/write failure
```

See Also:
    [collect_with_partial_failure][relayrouter.utils.gather.collect_with_partial_failure]:
        Degrades failed lookups to empty contributions.
    [RelayListCache][relayrouter.services.relay_list_cache.RelayListCache]:
        Degrades fetch and store failures to an empty relay list.
"""

from __future__ import annotations


class RelayRouterError(Exception):
    """Base exception for all relayrouter errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(RelayRouterError):
    """Invalid or missing configuration (YAML, CLI flags)."""


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(RelayRouterError):
    """Base for relay/network lookup failures.

    See Also:
        [RelayTimeoutError][relayrouter.core.exceptions.RelayTimeoutError]:
            The lookup did not complete in time.
    """


class RelayTimeoutError(ConnectivityError):
    """A relay-list or event lookup timed out."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ProtocolError(RelayRouterError):
    """NIP parsing or validation failure."""


class Nip19DecodeError(ProtocolError):
    """A bech32 identifier is malformed or of an unsupported type."""


class RelayListParseError(ProtocolError):
    """An event passed as a relay list has the wrong kind or shape."""


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class StorageError(RelayRouterError):
    """The relay-list store failed to read or write."""
