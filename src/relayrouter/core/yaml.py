"""YAML loading for relayrouter configuration and CLI fixtures.

Uses ``yaml.safe_load`` so untrusted files cannot instantiate Python
objects. Used by
[RelaySelectionConfig.from_yaml()][relayrouter.services.configs.RelaySelectionConfig.from_yaml]
and by the CLI to read selection fixtures.

Examples:
    ```python
    from relayrouter.core.yaml import load_yaml

    config = load_yaml("config/relayrouter.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML mapping.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed content as a dictionary; an empty dict for an empty file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file contains invalid YAML syntax.
        TypeError: If the document is not a mapping.

    Warning:
        The structure is not validated here. Pass the result to a Pydantic
        model such as
        [RelaySelectionConfig][relayrouter.services.configs.RelaySelectionConfig].
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise TypeError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return data
