"""FastAPI application for the royalty AMM."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from royalty_amm import __version__
from royalty_amm.api.endpoints import router
from royalty_amm.errors import AMMError, ErrorReason, PoolNotFound, Unauthorized

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

CONFLICT_REASONS = {ErrorReason.SLIPPAGE, ErrorReason.REENTRANT_CALL}

app = FastAPI(
    title="Royalty AMM",
    description="Pooled liquidity, swaps and royalties for non-fungible items",
    version=__version__,
)


def status_for(err: AMMError) -> int:
    """HTTP status code for an engine error."""
    if isinstance(err, PoolNotFound):
        return 404
    if isinstance(err, Unauthorized):
        return 403
    if err.reason in CONFLICT_REASONS:
        return 409
    return 400


@app.exception_handler(AMMError)
async def amm_error_handler(request: Request, exc: AMMError) -> JSONResponse:
    """Return the structured failure reason instead of a 500."""
    logger.info(
        "request_rejected",
        path=request.url.path,
        reason=exc.reason.value,
        detail=exc.detail,
    )
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging() -> None:
    log_level = logging.DEBUG if DEBUG else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    - AMM_* engine settings, see EngineConfig.from_env
    """
    configure_logging()
    uvicorn.run(
        "royalty_amm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
