"""FastAPI server for the local editor API.

Routes are thin wrappers over a :class:`TableSession`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from dataorganizer.config import load_config
from dataorganizer.errors import LockedError
from dataorganizer.logging import get_sink, set_log_dir
from dataorganizer.model import CellValue, ColumnType, Table
from dataorganizer.ui.service import ExportResult, TableSession
from dataorganizer.version_info import get_version_info


def create_app(directory: Path, session: TableSession | None = None) -> FastAPI:
    """Create the FastAPI application for a working directory.

    Args:
        directory: Holds ``dataorganizer.yaml``, the theme store and ``logs/``.
        session: Optional preconfigured session (tests inject one).

    Returns:
        Configured FastAPI instance.
    """
    from dataorganizer import __version__

    cfg = load_config(directory)
    set_log_dir(directory / "logs", fsync=bool(cfg["logging_fsync"]))

    app = FastAPI(title="DataOrganizer", version=__version__)
    app.state.session = session or TableSession.from_directory(directory)
    app.state.config = cfg
    app.include_router(_api_router(app))
    return app


# ---------------------------------------------------------------------------
# Request/response models
# ---------------------------------------------------------------------------


class RenameRequest(BaseModel):
    name: str


class AddColumnRequest(BaseModel):
    title: str
    position: int | None = None
    type: ColumnType = "text"


class LockRequest(BaseModel):
    locked: bool


class CellUpdateRequest(BaseModel):
    value: CellValue = None


class RowColorRequest(BaseModel):
    color: str


class IndexValueRequest(BaseModel):
    index_value: str | None = None


class ThemeRequest(BaseModel):
    theme_id: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _table(table: Table) -> dict[str, Any]:
    return table.model_dump(mode="json")


def _edit(fn, *args: Any) -> Any:
    """Run a session edit, mapping editing errors to HTTP errors."""
    try:
        return fn(*args)
    except LockedError as exc:
        raise HTTPException(409, str(exc))
    except KeyError as exc:
        raise HTTPException(404, exc.args[0] if exc.args else "Not found")
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII ``filename`` and an RFC 5987 ``filename*``."""
    fallback = filename.encode("ascii", "replace").decode("ascii")
    for ch in '?"\\':
        fallback = fallback.replace(ch, "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _download(result: ExportResult) -> Response:
    if not result.ok:
        raise HTTPException(400, result.error or "Export failed")
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": _content_disposition(result.filename or "export")},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _api_router(app: FastAPI) -> APIRouter:
    router = APIRouter(prefix="/api")

    def svc() -> TableSession:
        return app.state.session

    # -- Table --

    @router.get("/table")
    async def get_table() -> dict[str, Any]:
        return svc().snapshot()

    @router.post("/table/reset")
    async def reset_table() -> dict[str, Any]:
        return _table(svc().reset())

    @router.post("/table/rename")
    async def rename_table(req: RenameRequest) -> dict[str, Any]:
        return _table(svc().rename(req.name))

    @router.post("/table/custom")
    async def create_custom() -> dict[str, Any]:
        return _table(svc().create_custom())

    # -- Presets --

    @router.get("/presets")
    async def list_presets() -> list[dict[str, Any]]:
        return [p.model_dump(mode="json") for p in svc().list_presets()]

    @router.post("/presets/{preset_id}")
    async def select_preset(preset_id: str) -> dict[str, Any]:
        return _table(_edit(svc().select_preset, preset_id))

    # -- Columns --

    @router.post("/columns")
    async def add_column(req: AddColumnRequest) -> dict[str, Any]:
        return _table(_edit(svc().add_column, req.title, req.position, req.type))

    @router.delete("/columns/{column_id}")
    async def delete_column(column_id: str) -> dict[str, Any]:
        return _table(_edit(svc().delete_column, column_id))

    @router.post("/columns/{column_id}/lock")
    async def lock_column(column_id: str, req: LockRequest) -> dict[str, Any]:
        return _table(_edit(svc().set_column_locked, column_id, req.locked))

    # -- Rows --

    @router.post("/rows")
    async def add_row() -> dict[str, Any]:
        return svc().add_row().model_dump(mode="json")

    @router.delete("/rows/{row_id}")
    async def remove_row(row_id: str) -> dict[str, Any]:
        return _table(_edit(svc().remove_row, row_id))

    @router.put("/rows/{row_id}/cells/{column_id}")
    async def set_cell(row_id: str, column_id: str, req: CellUpdateRequest) -> dict[str, Any]:
        return _edit(svc().set_cell, row_id, column_id, req.value).model_dump(mode="json")

    @router.post("/rows/{row_id}/color")
    async def set_row_color(row_id: str, req: RowColorRequest) -> dict[str, Any]:
        return _edit(svc().set_row_color, row_id, req.color).model_dump(mode="json")

    @router.post("/rows/{row_id}/lock")
    async def lock_row(row_id: str, req: LockRequest) -> dict[str, Any]:
        return _edit(svc().set_row_locked, row_id, req.locked).model_dump(mode="json")

    @router.post("/rows/{row_id}/index")
    async def set_index_value(row_id: str, req: IndexValueRequest) -> dict[str, Any]:
        return _edit(svc().set_index_value, row_id, req.index_value).model_dump(mode="json")

    # -- Import / export --

    @router.post("/import/csv")
    async def import_csv(file: UploadFile = File(...)) -> dict[str, Any]:
        data = await file.read()
        max_bytes = int(app.state.config["max_upload_bytes"])
        if len(data) > max_bytes:
            raise HTTPException(400, f"File too large (max {max_bytes // (1024 * 1024)} MB)")
        result = svc().import_file(data, file.filename or "", file.content_type)
        if not result.ok:
            raise HTTPException(400, result.error or "Import failed")
        return {
            "ok": True,
            "table_name": result.table_name,
            "theme_hint": result.theme_hint,
            "table": _table(svc().table),
        }

    @router.get("/export/csv")
    async def export_csv(include_index: bool | None = Query(None)) -> Response:
        return _download(svc().export_csv(include_index))

    @router.get("/export/pdf")
    async def export_pdf(include_index: bool | None = Query(None)) -> Response:
        return _download(svc().export_pdf(include_index))

    # -- Theme / version --

    @router.get("/themes")
    async def list_themes() -> dict[str, Any]:
        return {
            "current": svc().theme.id,
            "themes": [t.model_dump(mode="json") for t in svc().list_themes()],
        }

    @router.post("/theme")
    async def set_theme(req: ThemeRequest) -> dict[str, Any]:
        return svc().set_theme(req.theme_id).model_dump(mode="json")

    @router.get("/version")
    def version() -> dict[str, Any]:
        cfg = app.state.config
        info = get_version_info(cfg["version_repo"], timeout=float(cfg["version_timeout_secs"]))
        return info.model_dump(mode="json")

    # -- Event log --

    @router.get("/events")
    async def get_events(
        level: str | None = Query(None),
        event_type: str | None = Query(None),
        limit: int = Query(200, ge=1, le=2000),
    ) -> list[dict[str, Any]]:
        sink = get_sink()
        if sink is None:
            return []
        return sink.read_events(level=level, event_type=event_type, limit=limit)

    return router
