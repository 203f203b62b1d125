"""
Worldsheet Kernel API — FastAPI endpoints.

A thin host surface over the core:
- Worksheet CRUD against the configured store
- Link slot status, selection lists, select / refresh / unlink
- Implication evaluation, with presentation-side dismissal
- Import of environmental parameters from an ECR worksheet
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from worldsheet_kernel.implications.engine import ImplicationEngine, visible_implications
from worldsheet_kernel.links.ecr_import import ECR_TOOL, import_from_ecr, import_preview, merge_import
from worldsheet_kernel.links.lifecycle import InvalidTransition, LinkTargetError
from worldsheet_kernel.links.registry import LinkConfigNotFound, configs_for, tool_display_name
from worldsheet_kernel.links.service import LinkService
from worldsheet_kernel.models.config import KernelConfig
from worldsheet_kernel.store.base import WorksheetNotFound, WorksheetStore
from worldsheet_kernel.store.sqlite import SqliteWorksheetStore


# --- Request/Response Models ---

class WorksheetCreateRequest(BaseModel):
    world_id: str
    tool_type: str
    title: Optional[str] = None
    data: dict = {}


class WorksheetUpdateRequest(BaseModel):
    title: Optional[str] = None
    data: Optional[dict] = None


class LinkSelectRequest(BaseModel):
    worksheet_id: str


class EvaluateRequest(BaseModel):
    form_state: dict
    dismissed_ids: List[str] = []


class EcrImportRequest(BaseModel):
    ecr_worksheet_id: str
    link: bool = True


# --- Application Factory ---

def create_app(
    store: Optional[WorksheetStore] = None,
    engine: Optional[ImplicationEngine] = None,
    config: Optional[KernelConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or KernelConfig()
    logging.getLogger("worldsheet_kernel").setLevel(config.log_level.upper())

    app = FastAPI(
        title="Worldsheet Kernel API",
        description="Cross-worksheet linking and implication inference",
        version="0.1.0",
    )

    ws = store or SqliteWorksheetStore(config.db_path)
    ie = engine or ImplicationEngine()
    links = LinkService(ws, config=config)

    app.state.store = ws
    app.state.engine = ie
    app.state.link_service = links
    app.state.config = config

    def _fetch(worksheet_id: str):
        worksheet = ws.fetch_by_id(worksheet_id)
        if worksheet is None:
            raise HTTPException(404, "Worksheet not found")
        return worksheet

    # === WORKSHEETS ===

    @app.post("/worksheets")
    def create_worksheet(req: WorksheetCreateRequest):
        worksheet = ws.create(req.world_id, req.tool_type, title=req.title, data=req.data)
        return worksheet.model_dump(mode="json")

    @app.get("/worksheets/{worksheet_id}")
    def get_worksheet(worksheet_id: str):
        return _fetch(worksheet_id).model_dump(mode="json")

    @app.put("/worksheets/{worksheet_id}")
    def update_worksheet(worksheet_id: str, req: WorksheetUpdateRequest):
        try:
            worksheet = ws.update(worksheet_id, title=req.title, data=req.data)
        except WorksheetNotFound:
            raise HTTPException(404, "Worksheet not found")
        return worksheet.model_dump(mode="json")

    @app.delete("/worksheets/{worksheet_id}")
    def delete_worksheet(worksheet_id: str):
        try:
            ws.delete(worksheet_id)
        except WorksheetNotFound:
            raise HTTPException(404, "Worksheet not found")
        return {"status": "deleted", "worksheet_id": worksheet_id}

    @app.get("/worlds/{world_id}/worksheets")
    def list_world_worksheets(world_id: str, tool_type: str):
        return [
            w.model_dump(mode="json")
            for w in ws.fetch_by_world_and_tool(world_id, tool_type)
        ]

    # === LINKS ===

    @app.get("/tools/{tool_type}/links")
    def get_tool_links(tool_type: str):
        return [
            {
                **c.model_dump(by_alias=True),
                "targetToolName": tool_display_name(c.target_tool),
            }
            for c in configs_for(tool_type)
        ]

    @app.get("/worksheets/{worksheet_id}/links")
    def get_link_statuses(worksheet_id: str):
        try:
            return links.status_all(worksheet_id)
        except WorksheetNotFound:
            raise HTTPException(404, "Worksheet not found")

    @app.get("/worksheets/{worksheet_id}/links/{key}")
    def get_link_status(worksheet_id: str, key: str):
        try:
            return links.status(worksheet_id, key)
        except (WorksheetNotFound, LinkConfigNotFound) as e:
            raise HTTPException(404, str(e))

    @app.get("/worksheets/{worksheet_id}/links/{key}/options")
    def get_link_options(worksheet_id: str, key: str):
        try:
            options = links.options(worksheet_id, key)
        except (WorksheetNotFound, LinkConfigNotFound) as e:
            raise HTTPException(404, str(e))
        return [
            {"id": w.id, "title": w.title or config.untitled_title}
            for w in options
        ]

    @app.post("/worksheets/{worksheet_id}/links/{key}")
    def select_link(worksheet_id: str, key: str, req: LinkSelectRequest):
        try:
            links.select(worksheet_id, key, req.worksheet_id)
        except (WorksheetNotFound, LinkConfigNotFound) as e:
            raise HTTPException(404, str(e))
        except LinkTargetError as e:
            raise HTTPException(422, str(e))
        return links.status(worksheet_id, key)

    @app.post("/worksheets/{worksheet_id}/links/{key}/refresh")
    def refresh_link(worksheet_id: str, key: str):
        try:
            links.refresh(worksheet_id, key)
        except (WorksheetNotFound, LinkConfigNotFound) as e:
            raise HTTPException(404, str(e))
        except InvalidTransition as e:
            raise HTTPException(409, str(e))
        return links.status(worksheet_id, key)

    @app.delete("/worksheets/{worksheet_id}/links/{key}")
    def unlink(worksheet_id: str, key: str):
        try:
            links.unlink(worksheet_id, key)
        except (WorksheetNotFound, LinkConfigNotFound) as e:
            raise HTTPException(404, str(e))
        return links.status(worksheet_id, key)

    # === IMPLICATIONS ===

    @app.post("/implications/evaluate")
    def evaluate_implications(req: EvaluateRequest):
        implications = ie.evaluate(req.form_state)
        visible = visible_implications(implications, req.dismissed_ids)
        return {
            "implications": [i.model_dump(by_alias=True) for i in implications],
            "visible": [i.model_dump(by_alias=True) for i in visible],
        }

    @app.get("/worksheets/{worksheet_id}/implications")
    def get_worksheet_implications(worksheet_id: str):
        worksheet = _fetch(worksheet_id)
        return [i.model_dump(by_alias=True) for i in ie.evaluate(worksheet.data)]

    # === ECR IMPORT ===

    @app.get("/worksheets/{ecr_worksheet_id}/import/ecr/preview")
    def preview_ecr_import(ecr_worksheet_id: str):
        ecr = _fetch(ecr_worksheet_id)
        if ecr.tool_type != ECR_TOOL:
            raise HTTPException(422, f"Worksheet {ecr.id} is not an ECR worksheet")
        return [p._asdict() for p in import_preview(ecr.data)]

    @app.post("/worksheets/{worksheet_id}/import/ecr")
    def import_ecr(worksheet_id: str, req: EcrImportRequest):
        target = _fetch(worksheet_id)
        ecr = _fetch(req.ecr_worksheet_id)
        if ecr.tool_type != ECR_TOOL:
            raise HTTPException(422, f"Worksheet {ecr.id} is not an ECR worksheet")
        merged = merge_import(target.data, import_from_ecr(ecr, link=req.link))
        updated = ws.update(worksheet_id, data=merged)
        return updated.model_dump(mode="json")

    return app


# Default application instance
app = create_app()
