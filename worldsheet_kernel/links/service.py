"""
Link Service — binds link slots to a source worksheet held in a store.

A source worksheet keeps each link's ref in its own payload under the
LinkConfig key. The service keeps one live LinkSlot per (source, key), runs
the requested transition against it, and writes the result back through
the store.

Behavioral Contract:
- Target fetches run outside the service lock. A select or refresh that is
  superseded while its fetch is in flight writes nothing.
- A write patches only its own link key into the latest stored payload, so
  transitions on other slots of the same source are never lost.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from worldsheet_kernel.links.lifecycle import FetchTicket, LinkSlot
from worldsheet_kernel.links.registry import WORKSHEET_LINKS, configs_for, require_config
from worldsheet_kernel.models.config import KernelConfig
from worldsheet_kernel.models.links import LinkConfig
from worldsheet_kernel.models.worksheet import LinkedWorksheetRef, LinkState, Worksheet
from worldsheet_kernel.store.base import WorksheetNotFound, WorksheetStore

logger = logging.getLogger(__name__)


def read_ref(data: dict, key: str) -> Optional[LinkedWorksheetRef]:
    """The ref stored under ``key``, or None if absent or unreadable."""
    raw = data.get(key) if isinstance(data, dict) else None
    if not isinstance(raw, dict):
        return None
    try:
        return LinkedWorksheetRef.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring malformed link ref under '%s'", key)
        return None


def write_ref(data: dict, key: str, ref: Optional[LinkedWorksheetRef]) -> dict:
    """A copy of ``data`` with the ref under ``key`` replaced (or removed)."""
    updated = dict(data)
    if ref is None:
        updated.pop(key, None)
    else:
        updated[key] = ref.to_payload()
    return updated


class LinkService:
    """Link operations for source worksheets held in a WorksheetStore."""

    def __init__(
        self,
        store: WorksheetStore,
        config: Optional[KernelConfig] = None,
        registry: Optional[Dict[str, List[LinkConfig]]] = None,
    ):
        self.store = store
        self.config = config or KernelConfig()
        self.registry = WORKSHEET_LINKS if registry is None else registry
        self._slots: Dict[Tuple[str, str], LinkSlot] = {}
        self._lock = threading.RLock()

    def _source(self, source_id: str) -> Worksheet:
        source = self.store.fetch_by_id(source_id)
        if source is None:
            raise WorksheetNotFound(source_id)
        return source

    def slot(self, source: Worksheet, key: str) -> LinkSlot:
        """
        The live LinkSlot for one link of ``source``.

        An idle slot is re-synced with the ref currently stored in the source
        payload. A slot with a fetch in flight is left as it is.
        """
        link_config = require_config(source.tool_type, key, self.registry)
        stored = read_ref(source.data, key)
        with self._lock:
            slot = self._slots.get((source.id, key))
            if slot is None:
                slot = LinkSlot(
                    link_config,
                    ref=stored,
                    untitled_title=self.config.untitled_title,
                )
                self._slots[(source.id, key)] = slot
            elif not slot.loading and slot.ref != stored:
                slot.ref = stored
                slot.is_broken = False
            return slot

    def slots(self, source: Worksheet) -> List[LinkSlot]:
        return [
            self.slot(source, c.key)
            for c in configs_for(source.tool_type, self.registry)
        ]

    def _save(self, source_id: str, slot: LinkSlot) -> Worksheet:
        fresh = self._source(source_id)
        data = write_ref(fresh.data, slot.config.key, slot.ref)
        return self.store.update(source_id, data=data)

    def _fetch(self, slot: LinkSlot, ticket: FetchTicket) -> Optional[Worksheet]:
        try:
            return self.store.fetch_by_id(ticket.worksheet_id)
        except Exception:
            with self._lock:
                slot.cancel(ticket)
            raise

    # --- Queries ---

    def options(self, source_id: str, key: str) -> List[Worksheet]:
        """Worksheets in the source's world that the slot may link to."""
        source = self._source(source_id)
        link_config = require_config(source.tool_type, key, self.registry)
        return self.store.fetch_by_world_and_tool(source.world_id, link_config.target_tool)

    def status(self, source_id: str, key: str) -> dict:
        """Slot state after re-fetching the linked worksheet. Never mutates the ref."""
        with self._lock:
            slot = self.slot(self._source(source_id), key)
            slot.detect_staleness(self.store)
            return self._describe(slot)

    def status_all(self, source_id: str) -> List[dict]:
        with self._lock:
            described = []
            for slot in self.slots(self._source(source_id)):
                slot.detect_staleness(self.store)
                described.append(self._describe(slot))
            return described

    def _describe(self, slot: LinkSlot) -> dict:
        return {
            "key": slot.config.key,
            "label": slot.config.label,
            "target_tool": slot.config.target_tool,
            "state": slot.state.value,
            "is_broken": slot.is_broken,
            "loading": slot.loading,
            "ref": slot.ref.to_payload() if slot.ref else None,
            "preview": [
                {"field": name, "value": value}
                for name, value in slot.preview(self.config.preview_limit)
            ],
        }

    # --- Transitions ---

    def select(self, source_id: str, key: str, target_id: str) -> Worksheet:
        """Link a slot to ``target_id``. Returns the source as stored afterwards."""
        with self._lock:
            slot = self.slot(self._source(source_id), key)
            ticket = slot.begin(target_id)
        target = self._fetch(slot, ticket)
        with self._lock:
            if not slot.apply_select(ticket, target):
                return self._source(source_id)
            return self._save(source_id, slot)

    def refresh(self, source_id: str, key: str) -> Worksheet:
        """Re-sync a link. Leaves the source untouched if the target is gone."""
        with self._lock:
            source = self._source(source_id)
            slot = self.slot(source, key)
            if slot.state == LinkState.STALE:
                return source
            ticket = slot.begin_refresh()
        target = self._fetch(slot, ticket)
        with self._lock:
            if not slot.apply_refresh(ticket, target):
                return self._source(source_id)
            return self._save(source_id, slot)

    def unlink(self, source_id: str, key: str) -> Worksheet:
        with self._lock:
            slot = self.slot(self._source(source_id), key)
            slot.unlink()
            return self._save(source_id, slot)
