from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from .config import get_settings
from .database import engine, init_db
from .errors import ClaimDeskError, InfrastructureError
from .routers import claims_router, invoices_router
from .utils.migrations import get_migration_state, run_migrations_if_enabled

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ClaimDesk Invoice & Advance Claim Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(invoices_router)
app.include_router(claims_router)


@app.exception_handler(ClaimDeskError)
async def claimdesk_error_handler(request: Request, exc: ClaimDeskError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errors": exc.errors()},
    )


@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    # Reads outside commit_or_raise surface here when the store is unreachable
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    return await claimdesk_error_handler(request, InfrastructureError("Record store unavailable; retry the operation"))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "errors": errors},
    )


@app.on_event("startup")
def _startup() -> None:
    run_migrations_if_enabled(engine)
    init_db()
    logger.info("ClaimDesk started")


@app.get("/health")
def health():
    return {"status": "ok", **get_migration_state(engine)}
