"""FastAPI application entry point."""

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from automation_console import __version__
from automation_console.app.config import (
    API_PREFIX,
    N8N_API_URL,
    ensure_directories,
)
from automation_console.app.errors import ConsoleError
from automation_console.app.routers import chat, docs, sheets, workflows
from automation_console.app.services.logging_service import RequestLogger, get_logger, setup_logging
from automation_console.app.utils.envelope import error_response

setup_logging(level=logging.INFO)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting Automation Console...")
    ensure_directories()
    if not N8N_API_URL:
        logger.warning("N8N_API_URL is not set; workflow features will report themselves as not configured")
    logger.info("Automation Console started successfully")
    yield
    logger.info("Shutting down Automation Console...")


app = FastAPI(
    title="Automation Console API",
    description="Backend API for the business automation dashboard and its assistant",
    version=__version__,
    lifespan=lifespan,
)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if os.environ.get("AUTOMATION_CONSOLE_CORS_ORIGINS"):
    _cors_origins = [o.strip() for o in os.environ["AUTOMATION_CONSOLE_CORS_ORIGINS"].split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Stamp every log line of a request with one id and echo it back."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
    with RequestLogger(request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Error envelope ──

@app.exception_handler(ConsoleError)
async def console_error_handler(request: Request, exc: ConsoleError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for item in exc.errors():
        field = ".".join(str(part) for part in item.get("loc", ()) if part != "body") or "request"
        problems.append(f"{field}: {item.get('msg', 'invalid')}")
    return error_response(400, "Invalid request: " + "; ".join(problems))


# Include routers
app.include_router(chat.router, prefix=API_PREFIX)
app.include_router(docs.router, prefix=API_PREFIX)
app.include_router(sheets.router, prefix=API_PREFIX)
app.include_router(workflows.router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
