"""
Relay URL normalization and local-network classification.

Parses, normalizes, and validates WebSocket relay URLs (``ws://`` or
``wss://``) so that one relay is never represented twice under different
spellings. Normalization is idempotent: feeding a normalized URL back in
returns the same string.

The module also owns the local-network policy used by the routing engine:
a user's own local relays (cache relays) are always kept, while local
relays found in *other* users' relay lists are dropped because they are
neither reachable nor trustworthy from here
([is_foreign_local_relay][relayrouter.models.relay.is_foreign_local_relay]).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import Any, ClassVar

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator

from .constants import NetworkType


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Relay:
    """Immutable, normalized Nostr relay URL.

    Validates and normalizes a WebSocket URL on construction:

    * scheme-less input defaults to ``wss://`` (``ws://`` for ``localhost``)
    * ``http``/``https`` are mapped to ``ws``/``wss``
    * non-ASCII hostnames are IDNA-encoded to punycode
    * scheme and host are lowercased, duplicate slashes collapsed and the
      trailing slash removed
    * default ports (80 for ``ws``, 443 for ``wss``) are omitted
    * query parameters are kept, sorted by key
    * local-network hosts are forced to ``ws://`` (TLS is never available
      on a LAN relay)

    Attributes:
        url: Fully normalized URL including scheme.
        network: Detected ``NetworkType`` enum value.
        scheme: URL scheme (``ws`` or ``wss``).
        host: Hostname or IP address (brackets stripped for IPv6).
        port: Explicit port number, or ``None`` when using the default.
        path: URL path component, or ``None``.

    Raises:
        ValueError: If the URL is malformed, uses an unsupported scheme,
            carries a fragment or credentials, or contains null bytes.

    Examples:
        ```python
        relay = Relay("wss://Relay.Damus.io/")
        relay.url       # 'wss://relay.damus.io'
        relay.network   # NetworkType.CLEARNET

        Relay("wss://192.168.1.5:4869").url  # 'ws://192.168.1.5:4869'
        ```
    """

    raw_url: str = field(repr=False)

    # Computed fields (set in __post_init__)
    url: str = field(init=False)
    network: NetworkType = field(init=False)
    scheme: str = field(init=False)
    host: str = field(init=False)
    port: int | None = field(init=False)
    path: str | None = field(init=False)

    _PORT_WS: ClassVar[int] = 80
    _PORT_WSS: ClassVar[int] = 443

    _SCHEME_ALIASES: ClassVar[dict[str, str]] = {
        "ws": "ws",
        "wss": "wss",
        "http": "ws",
        "https": "wss",
    }

    _NETWORK_TLDS: ClassVar[dict[str, NetworkType]] = {
        ".onion": NetworkType.TOR,
        ".i2p": NetworkType.I2P,
        ".loki": NetworkType.LOKI,
    }

    # Loopback, RFC 1918 private, CGNAT and link-local ranges.
    _LOCAL_NETWORKS: ClassVar[list[IPv4Network | IPv6Network]] = [
        ip_network("10.0.0.0/8"),
        ip_network("100.64.0.0/10"),
        ip_network("127.0.0.0/8"),
        ip_network("169.254.0.0/16"),
        ip_network("172.16.0.0/12"),
        ip_network("192.168.0.0/16"),
        ip_network("::1/128"),
        ip_network("fc00::/7"),
        ip_network("fe80::/10"),
    ]

    def __post_init__(self) -> None:
        if not isinstance(self.raw_url, str):
            raise TypeError(f"raw_url must be a str, got {type(self.raw_url).__name__}")
        if "\x00" in self.raw_url:
            raise ValueError("Relay URL contains null bytes")

        parsed = self._parse(self.raw_url)

        object.__setattr__(self, "url", parsed["url"])
        object.__setattr__(self, "network", parsed["network"])
        object.__setattr__(self, "scheme", parsed["scheme"])
        object.__setattr__(self, "host", parsed["host"])
        object.__setattr__(self, "port", parsed["port"])
        object.__setattr__(self, "path", parsed["path"])

    @property
    def is_local(self) -> bool:
        """Whether the relay lives on a loopback, private, or link-local address."""
        return self.network == NetworkType.LOCAL

    @staticmethod
    def detect_network(host: str) -> NetworkType:
        """Classify a hostname into a network type.

        Args:
            host: Hostname or IP address string to classify.

        Returns:
            The detected NetworkType. ``UNKNOWN`` for empty hostnames or
            hostnames with malformed labels.
        """
        if not host:
            return NetworkType.UNKNOWN

        host_bare = host.lower().strip("[]")

        for tld, network in Relay._NETWORK_TLDS.items():
            if host_bare.endswith(tld):
                return network

        if host_bare in ("localhost", "localhost.localdomain"):
            return NetworkType.LOCAL

        try:
            ip = ip_address(host_bare)
        except ValueError:
            pass
        else:
            is_local = any(ip in net for net in Relay._LOCAL_NETWORKS)
            return NetworkType.LOCAL if is_local else NetworkType.CLEARNET

        labels = host_bare.split(".")
        valid = all(
            label and not label.startswith("-") and not label.endswith("-") for label in labels
        )
        return NetworkType.CLEARNET if valid else NetworkType.UNKNOWN

    @staticmethod
    def _with_default_scheme(raw: str) -> str:
        """Prefix a scheme onto scheme-less input (``localhost`` gets ``ws://``)."""
        if "://" in raw:
            return raw
        if raw == "localhost" or raw.startswith(("localhost:", "localhost/")):
            return f"ws://{raw}"
        return f"wss://{raw}"

    @staticmethod
    def _encode_idna(url: str) -> str:
        """Punycode a non-ASCII hostname (``bücher.example`` -> ``xn--bcher-kva.example``).

        Raises:
            ValueError: If the hostname cannot be IDNA-encoded.
        """
        scheme, sep, rest = url.partition("://")
        ends = [i for i in (rest.find(c) for c in "/?#") if i != -1]
        end = min(ends, default=len(rest))
        authority, tail = rest[:end], rest[end:]
        userinfo, at, hostport = authority.rpartition("@")
        if hostport.startswith("["):
            return url
        host, colon, port = hostport.partition(":")
        if host.isascii():
            return url
        try:
            ascii_host = host.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise ValueError(f"Invalid host: {host!r}") from e
        return f"{scheme}{sep}{userinfo}{at}{ascii_host}{colon}{port}{tail}"

    @staticmethod
    def _sort_query(query: str) -> str:
        """Sort ``key=value`` pairs by key, keeping the order of repeated keys."""
        pairs = [pair for pair in query.split("&") if pair]
        return "&".join(sorted(pairs, key=lambda pair: pair.split("=", 1)[0]))

    @staticmethod
    def _parse(raw: str) -> dict[str, Any]:
        """Parse and normalize a raw relay URL string.

        Args:
            raw: Raw URL string (e.g., ``"Relay.Example.com:443/nostr/"``).

        Returns:
            Dictionary with ``url``, ``scheme``, ``host``, ``port``,
            ``path`` and ``network``.

        Raises:
            ValueError: If the scheme is not websocket-like or the URI is invalid.
        """
        text = raw.strip()
        if not text:
            raise ValueError("Relay URL is empty")
        if "#" in text:
            raise ValueError("Relay URL must not contain a fragment")

        uri = uri_reference(Relay._encode_idna(Relay._with_default_scheme(text))).normalize()

        scheme = Relay._SCHEME_ALIASES.get(uri.scheme or "")
        if scheme is None:
            raise ValueError(f"Invalid scheme: {uri.scheme!r} is not a websocket scheme")
        uri = uri.copy_with(scheme=scheme)

        validator = (
            Validator()
            .require_presence_of("scheme", "host")
            .allow_schemes("ws", "wss")
            .check_validity_of("scheme", "host", "port", "path")
        )
        try:
            validator.validate(uri)
        except UnpermittedComponentError:
            raise ValueError("Invalid scheme: must be ws or wss") from None
        except ValidationError as e:
            raise ValueError(f"Invalid URL: {e}") from None

        if uri.userinfo:
            raise ValueError("Relay URL must not contain credentials")

        host = (uri.host or "").strip("[]")
        network = Relay.detect_network(host)
        if network == NetworkType.UNKNOWN:
            raise ValueError(f"Invalid host: '{host}'")
        if network == NetworkType.LOCAL:
            scheme = "ws"

        port = int(uri.port) if uri.port else None
        if port == 0:
            raise ValueError("Invalid port: 0")

        path = uri.path or ""
        while "//" in path:
            path = path.replace("//", "/")
        path = path.rstrip("/") or None

        query = Relay._sort_query(uri.query) if uri.query else ""

        formatted_host = f"[{host}]" if ":" in host else host
        default_port = Relay._PORT_WSS if scheme == "wss" else Relay._PORT_WS
        netloc = f"{formatted_host}:{port}" if port and port != default_port else formatted_host
        url = f"{scheme}://{netloc}{path or ''}"
        if query:
            url = f"{url}?{query}"

        return {
            "url": url,
            "scheme": scheme,
            "host": host,
            "port": port,
            "path": path,
            "network": network,
        }


def normalize_relay_url(raw: Any) -> str | None:
    """Return the canonical form of *raw*, or ``None`` when it is not a relay URL.

    Never raises; callers must treat ``None`` as "drop this entry".
    """
    if not isinstance(raw, str):
        return None
    try:
        return Relay(raw).url
    except ValueError as e:
        logger.debug("relay_url_rejected url=%r reason=%s", raw, e)
        return None


def normalize_relay_urls(urls: Iterable[str]) -> list[str]:
    """Normalize *urls*, dropping invalid entries and duplicates (order preserved)."""
    seen: dict[str, None] = {}
    for raw in urls:
        url = normalize_relay_url(raw)
        if url is not None:
            seen.setdefault(url, None)
    return list(seen)


def is_valid_relay_url(url: Any) -> bool:
    """Structural check used before merging relay lists.

    Rejects empty strings and bare schemes (``ws://``, ``wss://``) without
    attempting a full parse.
    """
    return isinstance(url, str) and bool(url.strip()) and url.strip() not in ("ws://", "wss://")


def is_local_network_url(url: str) -> bool:
    """Whether *url* points at a loopback, private, or link-local host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        text = Relay._encode_idna(Relay._with_default_scheme(url.strip()))
        host = uri_reference(text).normalize().host
    except ValueError:
        return False
    return Relay.detect_network(host or "") == NetworkType.LOCAL


def is_foreign_local_relay(url: str, owner: str | None, acting_user: str | None) -> bool:
    """Whether *url* is a local-network relay announced by someone else.

    Local relays are only reachable and trustworthy when they belong to the
    acting user. When the acting user is unknown every local relay is
    treated as foreign.

    Args:
        url: Relay URL taken from *owner*'s relay list.
        owner: Public key of the user who announced the relay.
        acting_user: Public key of the user performing the action.
    """
    if acting_user is not None and owner == acting_user:
        return False
    return is_local_network_url(url)


def filter_foreign_local_relays(
    urls: Iterable[str], owner: str | None, acting_user: str | None
) -> list[str]:
    """Drop the entries of *urls* for which ``is_foreign_local_relay`` holds."""
    return [url for url in urls if not is_foreign_local_relay(url, owner, acting_user)]


def filter_blocked_relays(relays: Iterable[str], blocked: Iterable[str]) -> list[str]:
    """Remove every relay of *blocked* from *relays*, comparing normalized forms.

    Blocked entries that fail normalization are compared verbatim (stripped),
    so a malformed block entry can still match an identical malformed input.
    """
    blocked_set = {normalize_relay_url(url) or str(url).strip() for url in blocked}
    if not blocked_set:
        return list(relays)
    return [
        relay
        for relay in relays
        if (normalize_relay_url(relay) or str(relay).strip()) not in blocked_set
    ]


def relay_hostname(url: str) -> str:
    """Return the hostname of *url* for display, or *url* itself if unparseable."""
    try:
        host = uri_reference(url).host
    except ValueError:
        return url
    return host.strip("[]") if host else url
