"""FastAPI application for the tswap exchange.

Every domain error is a client error: operations are deterministic functions
of current state and input, so the caller must resubmit with corrected bounds.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tswap import __version__
from tswap.api.endpoints import router
from tswap.api.schemas import ErrorResponse
from tswap.errors import TSwapError
from tswap.safe_int import SafeIntError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("TSWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("TSWAP_PORT", "8000"))
DEBUG = os.environ.get("TSWAP_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="tswap",
    description="Constant-product pools against a single reference token",
    version=__version__,
)


@app.exception_handler(TSwapError)
@app.exception_handler(SafeIntError)
async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report a rejected operation as 400 with the error class name."""
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    logger.info("operation_rejected", path=request.url.path, error=body.error, detail=body.detail)
    return JSONResponse(status_code=400, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the tswap API server.

    Configuration via environment variables:
    - TSWAP_HOST: Host to bind to (default: 0.0.0.0)
    - TSWAP_PORT: Port to bind to (default: 8000)
    - TSWAP_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "tswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
