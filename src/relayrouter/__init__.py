r"""relayrouter -- Nostr relay selection and routing engine.

Decides which relays a Nostr client offers and pre-selects when the user
publishes: plain notes, replies, discussion threads, comments and public
messages. Routing follows the gossip (outbox/inbox) model: publish to your
own write relays plus the read relays of the people you address, never to
other users' local-network relays, never to blocked relays.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         Selection engine, caches, network adapter
             /   |   \
          core  nips  utils    Logging, errors, metrics | NIP-19/51/65 | fan-out
             \   |   /
              models           Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Relay URLs, events, relay lists, publish context. Zero I/O.
    core: Exceptions, structured logging, YAML loading, metrics.
    nips: NIP-19 mentions, NIP-51 lists, NIP-65 relay lists.
    utils: Concurrent fan-out with partial failure.
    services: Relay selection, publish targets, relay-list cache.

Note:
    Top-level imports (``from relayrouter import RelaySelectionService``)
    use lazy loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("relayrouter")

__all__ = [
    "Event",
    "EventHintTracker",
    "EventKind",
    "Logger",
    "NostrSdkFetcher",
    "PublishContext",
    "PublishTargetResolver",
    "Relay",
    "RelayList",
    "RelayListCache",
    "RelayRouterError",
    "RelaySelectionConfig",
    "RelaySelectionService",
    "SelectionResult",
    "create_relay_selection_service",
    "normalize_relay_url",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("relayrouter.core", "Logger"),
    "RelayRouterError": ("relayrouter.core", "RelayRouterError"),
    "Event": ("relayrouter.models", "Event"),
    "EventKind": ("relayrouter.models", "EventKind"),
    "PublishContext": ("relayrouter.models", "PublishContext"),
    "Relay": ("relayrouter.models", "Relay"),
    "RelayList": ("relayrouter.models", "RelayList"),
    "SelectionResult": ("relayrouter.models", "SelectionResult"),
    "normalize_relay_url": ("relayrouter.models", "normalize_relay_url"),
    "EventHintTracker": ("relayrouter.services", "EventHintTracker"),
    "NostrSdkFetcher": ("relayrouter.services", "NostrSdkFetcher"),
    "PublishTargetResolver": ("relayrouter.services", "PublishTargetResolver"),
    "RelayListCache": ("relayrouter.services", "RelayListCache"),
    "RelaySelectionConfig": ("relayrouter.services", "RelaySelectionConfig"),
    "RelaySelectionService": ("relayrouter.services", "RelaySelectionService"),
    "create_relay_selection_service": ("relayrouter.services", "create_relay_selection_service"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'relayrouter' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
