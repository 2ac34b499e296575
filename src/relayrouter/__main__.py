"""CLI entry point for relay selection.

Runs one selection from a YAML fixture describing the publish context and
prints the [SelectionResult][relayrouter.models.context.SelectionResult]
as JSON on stdout. Logs go to stderr.

Offline by default: relay lists, events and seen-on hints all come from the
fixture. With ``--relay`` the relay lists and mentioned events missing from
the fixture are fetched live through ``nostr_sdk``.

Fixture layout:

```yaml
context:                 # PublishContext.from_dict() fields
  user_pubkey: <hex>
  user_write_relays: [wss://a.relay]
  parent_event: {id: ..., pubkey: ..., kind: 1, tags: [], content: ""}
  content: "hi nostr:npub1..."
relay_lists:             # kind 10002 lists stored before selection
  <hex pubkey>: {write: [...], read: [...]}
events: []               # NIP-01 events; kind 10002/10432 are stored
hints:                   # seen-on relays per event ID
  <event id>: [wss://relay]
```

Examples:
    ```bash
    python -m relayrouter select fixture.yaml
    python -m relayrouter select fixture.yaml --config config/relayrouter.yaml
    python -m relayrouter select fixture.yaml --relay wss://purplepag.es --log-level DEBUG
    ```
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from relayrouter.core.exceptions import ConfigurationError, RelayRouterError
from relayrouter.core.logger import Logger, configure_logging
from relayrouter.core.yaml import load_yaml
from relayrouter.models.constants import EventKind, RelayScope
from relayrouter.models.context import PublishContext
from relayrouter.models.event import Event
from relayrouter.models.relay import normalize_relay_urls
from relayrouter.models.relay_list import RelayList, RelayListEntry
from relayrouter.nips.nip65 import RELAY_LIST_KINDS
from relayrouter.services.configs import RelaySelectionConfig
from relayrouter.services.hints import EventHintTracker
from relayrouter.services.network import NostrSdkFetcher
from relayrouter.services.relay_list_cache import InMemoryRelayListStore, RelayListCache
from relayrouter.services.selection import create_relay_selection_service


logger = Logger("cli")


class FixtureFetcher:
    """Offline relay-list and event source backed by fixture data."""

    def __init__(
        self, relay_lists: Mapping[str, RelayList], events: Sequence[Event] = ()
    ) -> None:
        self._relay_lists = dict(relay_lists)
        self._events = {event.id: event for event in events}

    async def fetch_relay_list(self, pubkey: str) -> RelayList:
        return self._relay_lists.get(pubkey, RelayList.empty())

    async def fetch_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)


def relay_list_from_fixture(data: Mapping[str, Any]) -> RelayList:
    """Build a relay list from ``{write: [...], read: [...]}``."""
    write = normalize_relay_urls(data.get("write", ()))
    read = normalize_relay_urls(data.get("read", ()))
    originals = []
    for url in dict.fromkeys([*write, *read]):
        if url in write and url in read:
            scope = RelayScope.BOTH
        else:
            scope = RelayScope.WRITE if url in write else RelayScope.READ
        originals.append(RelayListEntry(url, scope))
    return RelayList(
        write=tuple(write),
        read=tuple(read),
        original_relays=tuple(originals),
        created_at=int(data.get("created_at", 0)),
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="relayrouter",
        description="Nostr relay selection and routing engine",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    select = subparsers.add_parser("select", help="Select relays for a publish context")
    select.add_argument("fixture", type=Path, help="YAML fixture with the publish context")
    select.add_argument(
        "--config",
        type=Path,
        help="Engine config path (default: built-in defaults)",
    )
    select.add_argument(
        "--relay",
        action="append",
        default=[],
        metavar="URL",
        help="Fetch missing relay lists and events from this relay (repeatable)",
    )
    select.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    select.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON objects",
    )

    return parser.parse_args(argv)


async def run_select(args: argparse.Namespace) -> int:
    """Run one selection and print the result as JSON."""
    config = RelaySelectionConfig.from_yaml(args.config) if args.config else RelaySelectionConfig()

    fixture = load_yaml(args.fixture)
    context = PublishContext.from_dict(fixture.get("context") or {})
    events = [Event.from_dict(item) for item in fixture.get("events") or ()]
    relay_lists = {
        pubkey: relay_list_from_fixture(data)
        for pubkey, data in (fixture.get("relay_lists") or {}).items()
    }

    hints = EventHintTracker()
    for event_id, urls in (fixture.get("hints") or {}).items():
        for url in urls:
            hints.track_seen_on(event_id, url)

    offline = FixtureFetcher(relay_lists, events)
    store = InMemoryRelayListStore()
    for pubkey, relay_list in relay_lists.items():
        await store.put(pubkey, EventKind.RELAY_LIST, relay_list)
    seeding = RelayListCache(offline, store)
    for event in events:
        if event.kind in RELAY_LIST_KINDS:
            await seeding.ingest_event(event)

    async with contextlib.AsyncExitStack() as stack:
        if args.relay:
            fetcher: Any = await stack.enter_async_context(
                NostrSdkFetcher(args.relay, timeout=config.fetch_timeout)
            )
        else:
            fetcher = offline

        service = create_relay_selection_service(
            relay_list_fetcher=fetcher,
            event_fetcher=fetcher,
            hints=hints,
            store=store,
            config=config,
        )
        result = await service.select_relays(context)

    print(json.dumps(result.to_dict(), indent=2))
    return 0


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point: parse args, configure logging, run the command."""
    args = parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)

    try:
        return await run_select(args)
    except ConfigurationError as e:
        logger.error("config_invalid", error=str(e))
        return 2
    except (FileNotFoundError, TypeError, KeyError, ValueError, yaml.YAMLError) as e:
        logger.error("fixture_invalid", path=str(args.fixture), error=str(e))
        return 2
    except RelayRouterError as e:
        logger.error("selection_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
