"""
Sync Extractor — one-shot copy of configured fields out of a target worksheet.

The extractor is schema-agnostic: it knows field paths, not tools. Stamping a
display title into the snapshot is the caller's convention (``build_snapshot``).
"""

import copy
import json
import re
from typing import Any, Dict, List, Tuple

from worldsheet_kernel.models.worksheet import Worksheet
from worldsheet_kernel.paths.accessor import MISSING, get_path, last_segment

TITLE_KEY = "title"


def extract_synced_data(target_data: Any, fields: List[str]) -> Dict[str, Any]:
    """
    Copy each resolvable field of ``target_data`` into a flat dict keyed by the
    full field path. Unresolvable fields are omitted, never stored as empty.
    """
    synced: Dict[str, Any] = {}
    for field in fields:
        value = get_path(target_data, field)
        if value is MISSING:
            continue
        # Snapshot, not a view onto the target payload
        synced[field] = copy.deepcopy(value)
    return synced


def build_snapshot(
    target: Worksheet,
    fields: List[str],
    untitled_title: str = "Untitled",
) -> Dict[str, Any]:
    """Extracted fields plus the target's display title under ``"title"``."""
    synced = extract_synced_data(target.data, fields)
    synced[TITLE_KEY] = target.title or untitled_title
    return synced


_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def format_field_name(field: str) -> str:
    """``"biochemistry.biochemicalBasis"`` -> ``"Biochemical Basis"``."""
    leaf = last_segment(field)
    spaced = _CAMEL_BOUNDARY.sub(r" \1", leaf).strip()
    return spaced[:1].upper() + spaced[1:]


def _list_item(value: Any) -> str:
    """One element of a joined list: null is blank, bools are lowercase."""
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(_list_item(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def format_field_value(value: Any) -> str:
    if value is None or value is MISSING:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        return ", ".join(_list_item(v) for v in value) if value else "-"
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def synced_preview(synced_data: Dict[str, Any], limit: int = 6) -> List[Tuple[str, str]]:
    """Display rows for a snapshot, title excluded, in sync-field order."""
    rows = [
        (format_field_name(field), format_field_value(value))
        for field, value in synced_data.items()
        if field != TITLE_KEY
    ]
    return rows[:limit]
