"""
Path Accessor — total, dotted-path reads over nested worksheet payloads.

Worksheet payloads are opaque trees of scalars, lists and nested mappings.
Every component that reads a named field out of a payload goes through
``get_path``; nothing else walks the tree.

Behavioral Contract:
- Never raises for a missing or malformed path; absence is the normal
  "not yet filled in" case and is reported as ``MISSING``.
- Only mappings are traversed. Lists are opaque leaf values, never indexed.
- ``None`` is a real value (JSON null) and is distinct from ``MISSING``.
"""

from collections.abc import Mapping
from typing import Any


class _Missing:
    """Sentinel for an absent field."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

PATH_SEPARATOR = "."


def split_path(path: str) -> list:
    return path.split(PATH_SEPARATOR)


def get_path(record: Any, path: str, default: Any = MISSING) -> Any:
    """
    Read ``path`` (e.g. ``"stellarEnvironment.starType"``) out of ``record``.

    Returns ``default`` (``MISSING`` unless given) the moment a segment is
    absent or an intermediate value is not a mapping.
    """
    if not isinstance(path, str):
        return default

    current = record
    for segment in split_path(path):
        if not isinstance(current, Mapping):
            return default
        if segment not in current:
            return default
        current = current[segment]
    return current


def has_path(record: Any, path: str) -> bool:
    """True if ``path`` resolves to a value (which may be ``None``)."""
    return get_path(record, path) is not MISSING


def last_segment(path: str) -> str:
    """Human-facing leaf name of a path: ``"a.b.primaryModalities"`` -> ``"primaryModalities"``."""
    leaf = split_path(path)[-1]
    return leaf or path
