"""FastAPI application entry point for DikeLab."""

import logging

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dikelab.api.analytics import router as analytics_router
from dikelab.api.checklist import router as checklist_router
from dikelab.api.data_points import router as data_points_router
from dikelab.api.dependencies import get_workspace
from dikelab.api.exports import router as exports_router
from dikelab.api.imports import router as imports_router
from dikelab.api.taxonomy import router as taxonomy_router
from dikelab.config.settings import get_settings
from dikelab.storage.workspace import StorageKey, Workspace

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="DikeLab API",
    description="Dike settlement checklist generation, data import, and analytics.",
    version=APP_VERSION,
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(taxonomy_router)
app.include_router(checklist_router)
app.include_router(imports_router)
app.include_router(analytics_router)
app.include_router(data_points_router)
app.include_router(exports_router)


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Liveness probe reporting which workspace blobs are present."""
    present = set(workspace.store.keys())
    return {
        "status": "ok",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "blobs": {key.value: key.value in present for key in StorageKey},
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "DikeLab",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
