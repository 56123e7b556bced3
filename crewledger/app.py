from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crewledger.core.config import cors_origins
from crewledger.routes import projects, rates, reports, schedule


def create_app() -> FastAPI:
    app = FastAPI(title="Crewledger Work Schedule API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(schedule.router, prefix="/api")
    app.include_router(rates.router, prefix="/api")
    app.include_router(projects.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")

    return app


app = create_app()
