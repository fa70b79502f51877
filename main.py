import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

import app.models.codes  # noqa: F401
import app.models.out_manage  # noqa: F401
import app.models.system_log  # noqa: F401
from app.errors import LedgerError, TransientStoreError
from app.routers.codes import router as codes_router
from app.routers.out_manage import router as out_manage_router
from app.routers.out_manage_time import router as out_manage_time_router
from db import engine
from models import Base

logger = logging.getLogger("ops-portal-api")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


def _build_cors_origins() -> list[str]:
    required = {"http://localhost:3000"}
    extra = os.getenv("CORS_ORIGINS", "")
    if extra:
        for origin in extra.split(","):
            stripped = origin.strip()
            if stripped:
                required.add(stripped)
    return sorted(required)


app = FastAPI(title="Ops Portal API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(out_manage_router)
app.include_router(out_manage_time_router)
app.include_router(codes_router)


def _ledger_error_response(exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message, **exc.details},
    )


@app.exception_handler(LedgerError)
def handle_ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _ledger_error_response(exc)


@app.exception_handler(OperationalError)
def handle_store_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return _ledger_error_response(
        TransientStoreError("Database is unavailable; retry later.")
    )


def _should_create_schema() -> bool:
    """
    Safety switch. Keep OFF in Cloud Run.
    Only use for local/dev bootstrap.
    """
    return os.getenv("AUTO_CREATE_SCHEMA", "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }


@app.on_event("startup")
def on_startup() -> None:
    if _should_create_schema():
        logger.warning("AUTO_CREATE_SCHEMA is enabled -> running Base.metadata.create_all()")
        Base.metadata.create_all(bind=engine)
    else:
        logger.info("AUTO_CREATE_SCHEMA is disabled -> NOT running create_all()")


@app.get("/")
def root() -> dict:
    return {"ok": True, "service": "ops-portal-api", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict:
    return {"ok": True}
