from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from crewledger.application import get_schedule_service
from crewledger.core.validation import DuplicateProjectError, ValidationError

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(schedulable: bool = Query(default=False)) -> dict:
    service = get_schedule_service()
    projects = service.schedulable_projects() if schedulable else service.list_projects()
    return {"items": [project.model_dump(mode="json") for project in projects]}


@router.post("")
async def create_project(payload: dict) -> dict:
    service = get_schedule_service()
    try:
        project = service.add_project(payload)
    except DuplicateProjectError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return project.model_dump(mode="json")


@router.get("/{project_id}/expenses")
async def get_project_expenses(project_id: str) -> dict:
    service = get_schedule_service()
    return service.project_expense_breakdown(project_id).model_dump(mode="json")
