"""Shared validation helpers for frozen dataclass models.

Private module -- not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type constraints and
null-byte safety.
"""

from __future__ import annotations

import re
from typing import Any


_HEX64 = re.compile(r"^[0-9a-f]{64}$")


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_str_no_null(value: Any, name: str) -> None:
    """Raise if *value* is not a ``str`` or contains null bytes."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if "\x00" in value:
        raise ValueError(f"{name} contains null bytes")


def validate_hex64(value: Any, name: str) -> None:
    """Raise if *value* is not a 64-character lowercase hex string."""
    validate_str_no_null(value, name)
    if not _HEX64.match(value):
        raise ValueError(f"{name} must be 64 lowercase hex characters")


def is_hex64(value: Any) -> bool:
    """Return True if *value* is a 64-character lowercase hex string."""
    return isinstance(value, str) and bool(_HEX64.match(value))
