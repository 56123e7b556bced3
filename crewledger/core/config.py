from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

import yaml

from crewledger.core.schema import Worker

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@dataclass
class Roster:
    workers: list[Worker] = field(default_factory=list)
    default_daily_rate: Decimal = Decimal("0")

    def names(self) -> dict[str, str]:
        return {worker.id: worker.name for worker in self.workers}

    def has_worker(self, worker_id: str) -> bool:
        return any(worker.id == worker_id for worker in self.workers)

    def default_rates(self) -> dict[str, Decimal]:
        return {worker.id: self.default_daily_rate for worker in self.workers}


def _roster_path() -> Path:
    env_path = os.getenv("CREWLEDGER_ROSTER")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return CONFIG_DIR / "roster.yaml"


def load_roster(path: Path | None = None) -> Roster:
    path = path or _roster_path()
    if not path.exists():
        return Roster()
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    workers = [Worker(id=str(item["id"]), name=str(item.get("name") or item["id"])) for item in data.get("workers", [])]
    return Roster(workers=workers, default_daily_rate=Decimal(str(data.get("default_daily_rate", 0))))


def cors_origins() -> list[str]:
    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    return origins or ["http://localhost:3000", "http://127.0.0.1:3000"]


def reports_root() -> Path:
    env_root = os.getenv("REPORTS_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "reports"
