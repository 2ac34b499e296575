"""Configuration models for the routing engine.

Pydantic models with sensible defaults, so a YAML file only needs to name
the values it overrides. Relay URLs are normalized at validation time and
invalid ones are rejected, which keeps the engine free of un-normalized
configuration input.

See Also:
    [RelaySelectionService][relayrouter.services.selection.RelaySelectionService]:
        Main consumer of
        [RelaySelectionConfig][relayrouter.services.configs.RelaySelectionConfig].
    [PublishTargetResolver][relayrouter.services.targets.PublishTargetResolver]:
        Consumer of
        [PublishTargetsConfig][relayrouter.services.configs.PublishTargetsConfig].

Examples:
    ```yaml
    fallback_write_relays:
      - wss://relay.damus.io
      - wss://nos.lol
    author_read_relay_limit: 4
    lookup_timeout: 8.0
    publish:
      sender_write_limit: 6
    ```
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from relayrouter.core.exceptions import ConfigurationError
from relayrouter.core.yaml import load_yaml
from relayrouter.models.constants import FAST_WRITE_RELAY_URLS, PROFILE_RELAY_URLS
from relayrouter.models.relay import normalize_relay_url


def _normalize_config_relays(urls: list[str]) -> list[str]:
    normalized: dict[str, None] = {}
    for url in urls:
        result = normalize_relay_url(url)
        if result is None:
            raise ValueError(f"invalid relay URL: {url!r}")
        normalized.setdefault(result, None)
    return list(normalized)


class PublishTargetsConfig(BaseModel):
    """Limits used when computing publish destinations for a signed event.

    See Also:
        [PublishTargetResolver][relayrouter.services.targets.PublishTargetResolver]:
            The resolver that consumes this configuration.
    """

    sender_write_limit: int = Field(
        default=6, ge=1, le=50, description="Sender write relays used per publish"
    )
    recipient_read_limit: int = Field(
        default=4, ge=0, le=50, description="Read relays used per tagged recipient"
    )
    fallback_write_limit: int = Field(
        default=3, ge=1, le=50, description="Write relays retried when a hint relay fails"
    )
    profile_relays: list[str] = Field(
        default_factory=lambda: list(PROFILE_RELAY_URLS),
        description="Extra destinations for profile and list events",
    )

    @field_validator("profile_relays")
    @classmethod
    def _normalize_profile_relays(cls, value: list[str]) -> list[str]:
        return _normalize_config_relays(value)


class RelaySelectionConfig(BaseModel):
    """Routing engine configuration.

    Attributes:
        fallback_write_relays: Used whenever the user has no write relays.
        author_read_relay_limit: Parent-author read relays offered as
            candidates, bounding fan-out.
        lookup_timeout: Per-lookup timeout (seconds) for relay-list and
            event lookups; ``None`` leaves timing to the collaborators.
        not_found_ttl: Seconds a user without a relay list is answered empty
            before being looked up again; ``0`` always looks up.
        fetch_timeout: Timeout (seconds) of the ``nostr_sdk`` network adapter.
        publish: Publish-target limits.
    """

    fallback_write_relays: list[str] = Field(
        default_factory=lambda: list(FAST_WRITE_RELAY_URLS),
        description="Write relays used when the user has none configured",
    )
    author_read_relay_limit: int = Field(default=4, ge=0, le=50)
    lookup_timeout: float | None = Field(default=None, gt=0.0, le=120.0)
    not_found_ttl: float = Field(default=60.0, ge=0.0, le=3600.0)
    fetch_timeout: float = Field(default=10.0, ge=0.5, le=120.0)
    publish: PublishTargetsConfig = Field(default_factory=PublishTargetsConfig)

    @field_validator("fallback_write_relays")
    @classmethod
    def _normalize_fallback_relays(cls, value: list[str]) -> list[str]:
        return _normalize_config_relays(value)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> RelaySelectionConfig:
        """Load and validate a configuration file.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML,
                or does not match the schema.
        """
        try:
            data = load_yaml(config_path)
        except (FileNotFoundError, TypeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load {config_path}: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
