"""FastAPI entrypoint for the hadith isnad analysis API."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes.analysis import router as analysis_router
from api.routes.bulk import router as bulk_router
from api.routes.health import router as health_router
from api.routes.narrators import router as narrators_router
from isnad_engine import __version__
from isnad_engine.config import EngineSettings
from isnad_engine.service import HadithService

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Hadith Isnad API",
    description="Narrator chain extraction, structure scoring and bulk analysis of hadith texts",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _init_state_defaults(settings: EngineSettings) -> None:
    app.state.settings = settings
    app.state.service = None
    app.state.database_error = ""


@app.on_event("startup")
async def startup_event() -> None:
    """Build the analysis service exactly once on app startup."""

    settings = EngineSettings.from_env()
    logging.getLogger("isnad_engine").setLevel(settings.log_level)
    _init_state_defaults(settings)

    if settings.skip_database:
        app.state.database_error = "Database initialization skipped by HADITH_SKIP_DATABASE=1."
    else:
        try:
            app.state.service = HadithService.from_settings(settings)
            return
        except Exception as exc:  # pragma: no cover - guarded startup path
            app.state.database_error = str(exc)
            logger.exception("Failed to initialize database at %s", settings.database_url)

    # Without a database the engine still analyzes text; lookups and history are disabled.
    app.state.service = HadithService.from_settings(dataclasses.replace(settings, skip_database=True))


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Dispose the database engine on app shutdown."""

    service: Any = getattr(app.state, "service", None)
    if service is not None:
        try:
            service.close()
        except Exception:  # pragma: no cover - guarded shutdown path
            logger.exception("Error while disposing database engine")


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    return {"message": "Hadith Isnad API", "docs": "/docs"}


app.include_router(health_router)
app.include_router(analysis_router)
app.include_router(bulk_router)
app.include_router(narrators_router)
