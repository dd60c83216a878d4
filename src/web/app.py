"""FastAPI application entry point."""

import os
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from observability import metrics
from web.deps import get_config
from web.routes import ai, analytics, journal, user
from web.user_store import init_db, use_db

logger = structlog.get_logger()


def _verify_jwt_secret() -> None:
    if not os.getenv("JWT_SECRET"):
        logger.critical("JWT_SECRET env var not set")
        raise RuntimeError("JWT_SECRET required")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    use_db(config.paths.users_db)
    init_db()
    _verify_jwt_secret()
    logger.info("web.startup", environment=config.server.environment)
    yield
    logger.info("web.shutdown", **metrics.summary())


app = FastAPI(
    title="MindJournal",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow frontend origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_config().server.frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def bind_request_context(request: Request, call_next):
    """Tag every log line of a request with its id and path."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Mount routes
app.include_router(journal.router)
app.include_router(analytics.router)
app.include_router(ai.router)
app.include_router(user.router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error(
        "web.unhandled_error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    metrics.counter("web.errors")
    body = {"detail": "Something went wrong!"}
    config = request.app.dependency_overrides.get(get_config, get_config)()
    if config.is_development:
        body["error"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.get("/api/health")
async def health():
    return {"status": "ok", "metrics": metrics.summary()}
