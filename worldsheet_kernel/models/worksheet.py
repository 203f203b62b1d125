"""Worksheet — one saved instance of a tool's form data, scoped to a world."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Worksheet(BaseModel):
    """A worksheet row as held by the worksheet store."""

    id: str
    world_id: str
    tool_type: str                          # e.g., "planetary-profile"
    title: Optional[str] = None
    data: Dict[str, Any] = {}               # Arbitrarily-shaped form payload
    created_at: datetime
    updated_at: datetime


class LinkedWorksheetRef(BaseModel):
    """
    Point-in-time snapshot of a linked worksheet, stored inside the source
    worksheet's payload under the owning LinkConfig key.

    Serialized as ``{"worksheetId", "syncedAt", "syncedData"}``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    worksheet_id: str
    synced_at: datetime
    synced_data: Dict[str, Any] = {}

    @property
    def title(self) -> Optional[str]:
        return self.synced_data.get("title")

    def to_payload(self) -> dict:
        """JSON-ready dict in the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True)


class LinkState(str, Enum):
    UNLINKED = "unlinked"
    FRESH = "fresh"     # Ref stored, target still resolvable
    STALE = "stale"     # Ref stored, target no longer resolves
