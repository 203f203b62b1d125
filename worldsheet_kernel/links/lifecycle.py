"""
Link Lifecycle — the per-slot state a source worksheet keeps about one link.

States:
  UNLINKED → FRESH (select) → STALE (target no longer resolves)
  STALE → UNLINKED (unlink) | FRESH (re-select)
  FRESH → FRESH (refresh)

Behavioral Contract:
- The stored snapshot changes only through an explicit select or refresh.
  There is no background re-sync.
- Staleness is an observation, not a mutation: detecting a dangling target
  flips ``is_broken`` but leaves the stored ref untouched.
- Last request wins. Every fetch is issued under a ticket carrying the
  worksheet id it was issued for and the slot's generation at that moment.
  A result whose ticket is no longer current is discarded.
- Unlink is valid from every state and cancels any fetch in flight.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel

from worldsheet_kernel.links.sync import build_snapshot, synced_preview
from worldsheet_kernel.models.links import LinkConfig
from worldsheet_kernel.models.worksheet import LinkedWorksheetRef, LinkState, Worksheet
from worldsheet_kernel.store.base import WorksheetStore

logger = logging.getLogger(__name__)

AsyncFetch = Callable[[str], Awaitable[Optional[Worksheet]]]


class LinkTargetError(Exception):
    """Raised when a selected worksheet is missing or of the wrong tool-type."""
    pass


class InvalidTransition(Exception):
    """Raised when a transition is not defined for the slot's current state."""
    pass


class FetchTicket(BaseModel):
    """Tag attached to one in-flight fetch."""

    slot_key: str
    worksheet_id: str
    generation: int
    purpose: str                            # "select" | "refresh"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkSlot:
    """
    One configured link slot of a source worksheet.

    The slot holds the stored ref (``None`` when unlinked) together with the
    UI-facing observation flags ``is_broken`` and ``loading``.
    """

    def __init__(
        self,
        config: LinkConfig,
        ref: Optional[LinkedWorksheetRef] = None,
        untitled_title: str = "Untitled",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.ref = ref
        self.is_broken = False
        self.untitled_title = untitled_title
        self._clock = clock
        self._generation = 0
        self._pending: Optional[FetchTicket] = None

    # --- Observation ---

    @property
    def state(self) -> LinkState:
        if self.ref is None:
            return LinkState.UNLINKED
        return LinkState.STALE if self.is_broken else LinkState.FRESH

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def generation(self) -> int:
        return self._generation

    def preview(self, limit: int = 6) -> List[Tuple[str, str]]:
        if self.ref is None:
            return []
        return synced_preview(self.ref.synced_data, limit)

    def observe(self, worksheet: Optional[Worksheet]) -> bool:
        """
        Record the result of (re)fetching the linked worksheet.
        Returns the resulting broken flag.
        """
        if self.ref is None:
            self.is_broken = False
            return False
        broken = worksheet is None
        if broken and not self.is_broken:
            logger.warning(
                "Link '%s' is broken: worksheet %s no longer resolves",
                self.config.key, self.ref.worksheet_id,
            )
        self.is_broken = broken
        return broken

    def detect_staleness(self, store: WorksheetStore) -> bool:
        if self.ref is None:
            return self.observe(None)
        return self.observe(store.fetch_by_id(self.ref.worksheet_id))

    # --- Tickets ---

    def begin(self, worksheet_id: str, purpose: str = "select") -> FetchTicket:
        """Issue a ticket for a new fetch; supersedes any fetch in flight."""
        self._generation += 1
        ticket = FetchTicket(
            slot_key=self.config.key,
            worksheet_id=worksheet_id,
            generation=self._generation,
            purpose=purpose,
        )
        self._pending = ticket
        return ticket

    def _is_current(self, ticket: FetchTicket) -> bool:
        current = (
            ticket.generation == self._generation
            and self._pending is not None
            and self._pending.worksheet_id == ticket.worksheet_id
        )
        if not current:
            logger.debug(
                "Discarding superseded %s result for link '%s' (worksheet %s, "
                "generation %d, current %d)",
                ticket.purpose, self.config.key, ticket.worksheet_id,
                ticket.generation, self._generation,
            )
        return current

    def cancel(self, ticket: FetchTicket) -> None:
        """Drop the pending fetch if it is still the one issued under ``ticket``."""
        if self._pending is ticket:
            self._pending = None

    def _snapshot(self, worksheet: Worksheet) -> LinkedWorksheetRef:
        return LinkedWorksheetRef(
            worksheet_id=worksheet.id,
            synced_at=self._clock(),
            synced_data=build_snapshot(
                worksheet, self.config.sync_fields, self.untitled_title
            ),
        )

    # --- Transitions ---

    def apply_select(self, ticket: FetchTicket, worksheet: Optional[Worksheet]) -> bool:
        """
        Complete a select. Returns False if the result was superseded.
        Raises LinkTargetError if the target is missing or of the wrong tool.
        """
        if not self._is_current(ticket):
            return False
        self._pending = None

        if worksheet is None or worksheet.id != ticket.worksheet_id:
            raise LinkTargetError(
                f"Worksheet {ticket.worksheet_id} does not exist"
            )
        if worksheet.tool_type != self.config.target_tool:
            raise LinkTargetError(
                f"Worksheet {worksheet.id} is a '{worksheet.tool_type}' worksheet; "
                f"link '{self.config.key}' requires '{self.config.target_tool}'"
            )

        self.ref = self._snapshot(worksheet)
        self.is_broken = False
        logger.info("Linked '%s' to worksheet %s", self.config.key, worksheet.id)
        return True

    def begin_refresh(self) -> FetchTicket:
        if self.ref is None:
            raise InvalidTransition(f"Link '{self.config.key}' is not linked")
        return self.begin(self.ref.worksheet_id, purpose="refresh")

    def apply_refresh(self, ticket: FetchTicket, worksheet: Optional[Worksheet]) -> bool:
        """
        Complete a refresh. A target that cannot be fetched leaves the ref
        untouched and marks the slot broken. Returns True if the ref changed.
        """
        if not self._is_current(ticket):
            return False
        self._pending = None

        if self.ref is None or self.ref.worksheet_id != ticket.worksheet_id:
            return False
        if worksheet is None:
            self.observe(None)
            return False

        self.ref = self._snapshot(worksheet)
        self.is_broken = False
        logger.info("Refreshed link '%s' from worksheet %s", self.config.key, worksheet.id)
        return True

    def select(self, store: WorksheetStore, worksheet_id: str) -> bool:
        ticket = self.begin(worksheet_id)
        return self.apply_select(ticket, store.fetch_by_id(worksheet_id))

    def refresh(self, store: WorksheetStore) -> bool:
        """
        Re-sync from the current state of the linked worksheet.
        No-op while broken; the repair path from STALE is unlink or re-select.
        """
        if self.state == LinkState.STALE:
            return False
        ticket = self.begin_refresh()
        return self.apply_refresh(ticket, store.fetch_by_id(ticket.worksheet_id))

    async def select_async(self, fetch: AsyncFetch, worksheet_id: str) -> bool:
        ticket = self.begin(worksheet_id)
        worksheet = await self._await_fetch(fetch, ticket)
        return self.apply_select(ticket, worksheet)

    async def refresh_async(self, fetch: AsyncFetch) -> bool:
        if self.state == LinkState.STALE:
            return False
        ticket = self.begin_refresh()
        worksheet = await self._await_fetch(fetch, ticket)
        return self.apply_refresh(ticket, worksheet)

    async def _await_fetch(self, fetch: AsyncFetch, ticket: FetchTicket) -> Optional[Worksheet]:
        try:
            return await fetch(ticket.worksheet_id)
        except Exception:
            self.cancel(ticket)
            raise

    def unlink(self) -> None:
        """Clear the ref from any state and cancel any fetch in flight."""
        if self.ref is not None:
            logger.info("Unlinked '%s' from worksheet %s", self.config.key, self.ref.worksheet_id)
        self._generation += 1
        self._pending = None
        self.ref = None
        self.is_broken = False
