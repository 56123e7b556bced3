from __future__ import annotations

from pathlib import Path

import pandas as pd

from crewledger.core.schema import ProjectExpenseBreakdown
from crewledger.exporters.money import quantize_money

COLUMNS = ["project_id", "worker_id", "worker_name", "date", "share", "share_percent", "cost"]


def export_project_breakdown(path: Path, breakdown: ProjectExpenseBreakdown) -> Path:
    records = [
        {
            "project_id": breakdown.project_id,
            "worker_id": worker.worker_id,
            "worker_name": worker.worker_name,
            "date": item.date,
            "share": item.share,
            "share_percent": item.share_percent,
            "cost": quantize_money(item.cost),
        }
        for worker in breakdown.breakdown
        for item in worker.per_date_allocations
    ]
    df = pd.DataFrame(records, columns=COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
