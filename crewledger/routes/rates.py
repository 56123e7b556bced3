from __future__ import annotations

from fastapi import APIRouter, HTTPException

from crewledger.application import get_schedule_service
from crewledger.core.schema import money_json
from crewledger.core.validation import UnknownReferenceError, ValidationError

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("")
async def list_worker_rates() -> dict:
    service = get_schedule_service()
    items = service.worker_summaries()
    return {
        "items": [item.model_dump(mode="json") for item in items],
        "grand_total": money_json(service.grand_total()),
    }


@router.put("")
async def save_all_rates(payload: dict) -> dict:
    rates = payload.get("rates")
    if not isinstance(rates, dict):
        raise HTTPException(status_code=400, detail="rates must be an object")
    service = get_schedule_service()
    try:
        saved = service.save_all_rates(rates)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"rates": {worker_id: money_json(rate) for worker_id, rate in saved.items()}}


@router.put("/{worker_id}")
async def update_worker_rate(worker_id: str, payload: dict) -> dict:
    if "rate" not in payload:
        raise HTTPException(status_code=400, detail="rate is required")
    service = get_schedule_service()
    try:
        rate = service.update_daily_rate(worker_id, payload["rate"])
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"worker_id": worker_id, "rate": money_json(rate)}


@router.get("/workers/{worker_id}/expenses")
async def get_worker_expenses(worker_id: str) -> dict:
    service = get_schedule_service()
    if not service.roster.has_worker(worker_id):
        raise HTTPException(status_code=404, detail="worker not found")
    return service.worker_expense_breakdown(worker_id).model_dump(mode="json")
