from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from fastapi import APIRouter
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from crewledger.application import get_schedule_service
from crewledger.core.config import reports_root
from crewledger.exporters.project_breakdown_csv import export_project_breakdown
from crewledger.exporters.worker_expenses_csv import export_worker_expenses

router = APIRouter(prefix="/reports", tags=["reports"])


def _scratch_path(stem: str) -> Path:
    # one file per request; removed once the response has been sent
    return reports_root() / f"{stem}-{uuid4().hex}.csv"


def _send_csv(path: Path, filename: str) -> FileResponse:
    return FileResponse(
        path,
        media_type="text/csv",
        filename=filename,
        background=BackgroundTask(path.unlink, missing_ok=True),
    )


@router.get("/workers.csv")
async def download_worker_expenses() -> FileResponse:
    service = get_schedule_service()
    path = export_worker_expenses(_scratch_path("worker_expenses"), service.worker_summaries())
    return _send_csv(path, "worker_expenses.csv")


@router.get("/projects/{project_id}.csv")
async def download_project_breakdown(project_id: str) -> FileResponse:
    service = get_schedule_service()
    breakdown = service.project_expense_breakdown(project_id)
    path = export_project_breakdown(_scratch_path(f"project_{project_id}"), breakdown)
    return _send_csv(path, f"project_{project_id}.csv")
