from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from crewledger.application import get_schedule_service
from crewledger.core.validation import DuplicateAssignmentError, UnknownReferenceError, ValidationError

router = APIRouter(prefix="/schedule", tags=["schedule"])
log = logging.getLogger(__name__)


@router.get("/assignments")
async def list_assignments(
    worker_id: str | None = Query(default=None),
    project_id: str | None = Query(default=None),
    date: str | None = Query(default=None),
) -> dict:
    service = get_schedule_service()
    rows = service.list_assignments(worker_id=worker_id, project_id=project_id, date=date)
    return {"items": [row.model_dump(mode="json") for row in rows]}


@router.post("/assignments")
async def create_assignment(payload: dict) -> dict:
    missing = [key for key in ("worker_id", "project_id", "date") if not payload.get(key)]
    if missing:
        raise HTTPException(status_code=400, detail=f"{', '.join(missing)} required")

    service = get_schedule_service()
    try:
        assignment = service.assign_worker(str(payload["worker_id"]), str(payload["project_id"]), str(payload["date"]))
    except DuplicateAssignmentError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return assignment.model_dump(mode="json")


@router.delete("/assignments/{assignment_id}")
async def delete_assignment(assignment_id: str) -> dict:
    service = get_schedule_service()
    try:
        removed = service.remove_assignment(assignment_id)
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "id": removed.id}


@router.get("/workers/{worker_id}/days/{date}")
async def get_day_allocation(worker_id: str, date: str) -> dict:
    service = get_schedule_service()
    try:
        shares = service.day_allocation(worker_id, date)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"worker_id": worker_id, "date": date, "items": [share.model_dump(mode="json") for share in shares]}


@router.get("/view")
async def get_schedule_view(
    anchor: str | None = Query(default=None),
    mode: str = Query(default="week"),
) -> dict:
    service = get_schedule_service()
    try:
        return service.schedule_view(anchor, mode)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/load")
async def load_schedule(payload: dict) -> dict:
    assignments = payload.get("assignments")
    if not isinstance(assignments, list):
        raise HTTPException(status_code=400, detail="assignments must be a list")
    rates = payload.get("rates")
    if rates is not None and not isinstance(rates, dict):
        raise HTTPException(status_code=400, detail="rates must be an object")

    service = get_schedule_service()
    try:
        count = service.load_schedule(assignments, rates)
    except DuplicateAssignmentError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception:
        log.exception("Unexpected failure while loading schedule")
        raise
    return {"loaded": count}
