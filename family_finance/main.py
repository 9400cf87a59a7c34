from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from family_finance.api.accounts import router as accounts_router
from family_finance.api.budgets import router as budgets_router
from family_finance.api.expenses import router as expenses_router
from family_finance.api.exports import router as exports_router
from family_finance.api.notifications import router as notifications_router
from family_finance.core.config import settings
from family_finance.core.errors import BudgetError, BudgetFormError
from family_finance.db.base import Base
from family_finance.db.session import engine
import family_finance.models  # noqa: F401 - register models with Base.metadata

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
)
request_logger = logging.getLogger("family_finance.request")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create DB tables
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="Family Finance API",
    description="Budgets, expenses and accounts for personal and family finance tracking",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app_cors_origins.split(",") if settings.app_cors_origins else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    req_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    account = request.query_params.get("account_id") or "-"
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        request_logger.exception(
            "request_failed id=%s %s %s account=%s ms=%s",
            req_id,
            request.method,
            request.url.path,
            account,
            _elapsed_ms(started),
        )
        raise
    response.headers["x-request-id"] = req_id
    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    request_logger.log(
        level,
        "request_done id=%s %s %s account=%s status=%s ms=%s",
        req_id,
        request.method,
        request.url.path,
        account,
        response.status_code,
        _elapsed_ms(started),
    )
    return response


@app.exception_handler(BudgetFormError)
async def budget_form_error_handler(request: Request, exc: BudgetFormError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.messages()})


@app.exception_handler(BudgetError)
async def budget_error_handler(request: Request, exc: BudgetError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "errors": {exc.field: exc.message}})


app.include_router(accounts_router)
app.include_router(budgets_router)
app.include_router(expenses_router)
app.include_router(exports_router)
app.include_router(notifications_router)


@app.get("/health", include_in_schema=False)
def health() -> dict:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        request_logger.exception("health_db_unreachable")
        return {"ok": False, "database": "unreachable"}
    return {"ok": True, "database": "ok"}
