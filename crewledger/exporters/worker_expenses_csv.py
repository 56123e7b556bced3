from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from crewledger.core.schema import WorkerSummary
from crewledger.exporters.money import quantize_money


def export_worker_expenses(path: Path, rows: Iterable[WorkerSummary]) -> Path:
    records = []
    for row in rows:
        records.append({
            "worker_id": row.worker_id,
            "worker_name": row.worker_name,
            "daily_rate": quantize_money(row.daily_rate),
            "total_days": row.total_days,
            "total_expense": quantize_money(row.total_expense),
        })
    df = pd.DataFrame(records, columns=["worker_id", "worker_name", "daily_rate", "total_days", "total_expense"])
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
