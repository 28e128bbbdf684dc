"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from backend.api.limiter import limiter
from backend.api.routes.tools import TOOL_CORS_HEADERS
from backend.config import settings
from backend.db.base import dispose_engine, init_db
from backend.exceptions import AppError
from backend.logging_config import setup_logging
from backend.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",")]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, initialize database and start the result cache sweep."""
    setup_logging(settings.log_level, settings.log_file or None)
    try:
        init_db()
    except ValueError:
        logger.warning("DATABASE_URL not configured, skipping table creation")
    app.state.result_cache.start()
    yield
    await app.state.result_cache.stop()
    dispose_engine()


app = FastAPI(
    title="HR Sourcing Agent API",
    description="Candidate sourcing through a hosted LLM agent and LinkedIn search",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.state.result_cache = ResultCache(
    ttl=settings.result_cache_ttl,
    sweep_interval=settings.result_cache_sweep_interval,
)


def _error_headers(request: Request) -> dict | None:
    # Tool errors must stay readable from the agent platform's origin
    if request.url.path.startswith("/tools/"):
        return TOOL_CORS_HEADERS
    return None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render the error taxonomy as {"success": false, "error", "details"}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=_error_headers(request),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors like any other missing input."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "details": details},
        headers=_error_headers(request),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a clear message when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}"},
    )


# The agent platform calls the tool endpoints from a third-party origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-token", "X-User-ID"],
)


# Import and include routers
from backend.api.routes import candidates, chat, tools  # noqa: E402

app.include_router(tools.router, prefix="/tools", tags=["Tools"])
app.include_router(chat.router, prefix="/chat", tags=["Chat"])
app.include_router(candidates.router, prefix="/candidates", tags=["Candidates"])


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "cached_sessions": app.state.result_cache.session_count()}
