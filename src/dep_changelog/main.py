"""FastAPI application exposing changelog computation.

Endpoints:
- POST /changelog - Compute the changelog manifest for one upgrade
- GET /health - Health check for load balancers and monitoring

Architecture notes:
- FastAPI handles HTTP concerns (routing, validation, serialization)
- The assembler handles the changelog logic
- One assembler (and so one release-pair cache) lives for the app's lifetime

To run locally:
    uvicorn dep_changelog.main:app --reload --port 8000
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from dep_changelog.changelog import ChangelogAssembler
from dep_changelog.hosting.github import TagListError
from dep_changelog.logging_config import get_logger, setup_logging
from dep_changelog.schemas import ChangeLogConfig, ChangeLogErrorResult, ChangeLogResult

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Application Lifespan (startup/shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the assembler once at startup."""
    setup_logging()
    app.state.assembler = ChangelogAssembler()
    yield


# ---------------------------------------------------------------------------
# FastAPI App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Dependency Changelog",
    description="Compare links between the releases of a dependency upgrade",
    version="0.1.0",
    lifespan=lifespan,
)


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        response.headers["X-Process-Time"] = f"{duration:.2f}s"
        logger.info(
            "request_handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=round(duration, 3),
        )
        return response


app.add_middleware(TimingMiddleware)


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle ValueError exceptions (e.g., unknown versioning scheme)."""
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": str(exc)},
    )


@app.exception_handler(TagListError)
async def tag_list_error_handler(request: Request, exc: TagListError) -> JSONResponse:
    """The host rejected our credentials while listing tags."""
    return JSONResponse(
        status_code=502,
        content={"error": "host_credentials_rejected", "detail": str(exc)},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy"}


@app.post(
    "/changelog",
    response_model=ChangeLogResult | ChangeLogErrorResult | None,
)
async def get_changelog(
    config: ChangeLogConfig, request: Request
) -> ChangeLogResult | ChangeLogErrorResult | None:
    """Compute the changelog manifest for a dependency upgrade.

    Returns null when the dependency is not eligible for a changelog and
    an error object when a GitHub token has to be configured.
    """
    assembler: ChangelogAssembler = request.app.state.assembler
    return await assembler.get_changelog(config)
