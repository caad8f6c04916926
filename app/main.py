"""
main.py — HousingHub API application

Builds the FastAPI app: session middleware, routers for the quote
workflow and notification inbox, and exception handlers that render every
error as an ErrorResponse JSON body.

Business Rules:
- QuoteWorkflowError subclasses carry their own HTTP status
  (404 not found, 400 invalid quote, 403 tenant mismatch,
  409 invalid transition, 500 store failure)
- Validation errors render as 422 with the pydantic error list in "detail"
- Every error body echoes the X-Request-ID header when the client sends one

Called by: uvicorn (app.main:app)
Depends on: config, logging_config, http_client, routers/*
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.sessions import SessionMiddleware

from .config import settings
from .http_client import close_clients
from .logging_config import setup_logging
from .routers import notifications, quotes
from .schemas.errors import ErrorResponse
from .services.quote_errors import QuoteWorkflowError


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"HousingHub API starting ({settings.app_url})")
    yield
    await close_clients()
    logger.info("HousingHub API stopped")


app = FastAPI(title="HousingHub", version="1.0.0", lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, https_only=False)


# ── Error rendering ───────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id") or uuid.uuid4().hex[:12]


def _error(request: Request, status_code: int, message: str, detail: list | None = None) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        status_code=status_code,
        request_id=_request_id(request),
        detail=detail,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(QuoteWorkflowError)
async def quote_workflow_error_handler(request: Request, exc: QuoteWorkflowError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc}")
    return _error(request, exc.status_code, str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error(request, 422, "Validation error", detail=jsonable_encoder(exc.errors()))


# ── Routes ────────────────────────────────────────────────────────────


app.include_router(quotes.router)
app.include_router(notifications.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
