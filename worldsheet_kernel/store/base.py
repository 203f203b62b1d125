"""
Worksheet Store contract — the external collaborator the core reads through.

Worksheets are created, edited and deleted outside the linking core; the
core itself only reads by id or by (world, tool-type). ``fetch_by_id``
returning ``None`` is the NotFound case.
"""

import asyncio
from typing import List, Optional, Protocol

from worldsheet_kernel.models.worksheet import Worksheet


class WorksheetNotFound(KeyError):
    """Raised by update/delete for an id the store does not hold."""
    pass


class WorksheetStore(Protocol):
    def fetch_by_id(self, worksheet_id: str) -> Optional[Worksheet]:
        ...

    def fetch_by_world_and_tool(self, world_id: str, tool_type: str) -> List[Worksheet]:
        ...

    def create(
        self,
        world_id: str,
        tool_type: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Worksheet:
        ...

    def update(
        self,
        worksheet_id: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Worksheet:
        ...

    def delete(self, worksheet_id: str) -> None:
        ...


class AsyncWorksheetFetcher:
    """
    Awaitable ``fetch_by_id`` over a synchronous store, for the link
    transitions that cross the fetch boundary asynchronously.
    """

    def __init__(self, store: WorksheetStore):
        self.store = store

    async def fetch_by_id(self, worksheet_id: str) -> Optional[Worksheet]:
        return await asyncio.to_thread(self.store.fetch_by_id, worksheet_id)

    async def __call__(self, worksheet_id: str) -> Optional[Worksheet]:
        return await self.fetch_by_id(worksheet_id)
