"""
In-memory Worksheet Store.

Used by tests and by hosts that keep worksheets elsewhere and only need a
working set for linking and evaluation.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from worldsheet_kernel.models.worksheet import Worksheet
from worldsheet_kernel.store.base import WorksheetNotFound

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryWorksheetStore:
    """Dict-backed worksheet store. Returns copies, never live records."""

    def __init__(self):
        self._worksheets: Dict[str, Worksheet] = {}

    def fetch_by_id(self, worksheet_id: str) -> Optional[Worksheet]:
        worksheet = self._worksheets.get(worksheet_id)
        return worksheet.model_copy(deep=True) if worksheet else None

    def fetch_by_world_and_tool(self, world_id: str, tool_type: str) -> List[Worksheet]:
        """Worksheets of one tool in one world, most recently updated first."""
        matches = [
            w for w in self._worksheets.values()
            if w.world_id == world_id and w.tool_type == tool_type
        ]
        matches.sort(key=lambda w: w.updated_at, reverse=True)
        return [w.model_copy(deep=True) for w in matches]

    def create(
        self,
        world_id: str,
        tool_type: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
        worksheet_id: Optional[str] = None,
    ) -> Worksheet:
        now = _utcnow()
        worksheet = Worksheet(
            id=worksheet_id or str(uuid4()),
            world_id=world_id,
            tool_type=tool_type,
            title=title,
            data=copy.deepcopy(data or {}),
            created_at=now,
            updated_at=now,
        )
        self._worksheets[worksheet.id] = worksheet
        logger.debug("Created %s worksheet %s", tool_type, worksheet.id)
        return worksheet.model_copy(deep=True)

    def update(
        self,
        worksheet_id: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Worksheet:
        worksheet = self._worksheets.get(worksheet_id)
        if worksheet is None:
            raise WorksheetNotFound(worksheet_id)
        if title is not None:
            worksheet.title = title
        if data is not None:
            worksheet.data = copy.deepcopy(data)
        worksheet.updated_at = max(_utcnow(), worksheet.updated_at)
        return worksheet.model_copy(deep=True)

    def delete(self, worksheet_id: str) -> None:
        if self._worksheets.pop(worksheet_id, None) is None:
            raise WorksheetNotFound(worksheet_id)
        logger.debug("Deleted worksheet %s", worksheet_id)
