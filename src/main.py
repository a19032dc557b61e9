"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.pf_account.api.router import router as account_router
from src.pf_category.application.service import CategoryService
from src.pf_common.database import async_session_factory, engine
from src.pf_common.errors import AppError, ValidationError
from src.pf_common.redis_client import close_redis, get_redis
from src.pf_common.response import error_response
from src.pf_gateway.middleware.rate_limit import RateLimitMiddleware
from src.pf_gateway.middleware.request_log import RequestLogMiddleware
from src.pf_investment.api.router import router as investment_router
from src.pf_ledger.api.router import router as ledger_router
from src.pf_transaction.api.router import expense_router, income_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, seed shared categories. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    if settings.SEED_DEFAULT_CATEGORIES:
        async with async_session_factory() as session:
            await CategoryService().seed_defaults(session)
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Starlette runs the last-added middleware first: request log wraps rate limiting.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    err = ValidationError(f"{location}: {first.get('msg', 'invalid input')}")
    return await app_error_handler(request, err)


app.include_router(account_router, prefix="/api/v1")
app.include_router(ledger_router, prefix="/api/v1")
app.include_router(expense_router, prefix="/api/v1")
app.include_router(income_router, prefix="/api/v1")
app.include_router(investment_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
