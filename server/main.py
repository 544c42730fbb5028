"""Entry point for the bandwidth test server."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.chunk import Chunk
from common.exceptions import (
    BandwidthTestError,
    InvalidFormatError,
    ReadAbortedError,
    UnsupportedMethodError,
)
from common.logging_config import get_logger
from server.config import ServerConfig
from server.routes import transfer_router
from server.routes.transfer_routes import format_caller

logger = get_logger(__name__)


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The chunk is allocated here, once, and shared read-only by every request.

    Args:
        config: Server settings (defaults when omitted)

    Returns:
        FastAPI application
    """
    config = config or ServerConfig()

    app = FastAPI(
        title="Bandwidth Test Server",
        description="Streams and swallows synthetic payloads for throughput tests",
        version="1.0.0"
    )
    app.state.config = config
    app.state.chunk = Chunk(config.chunk_size)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Tag each request with an id and log when its handler starts and returns.

        For downloads the handler returns before the body is streamed, so the
        duration here is setup time only; the transfer itself is logged by
        the download generator.
        """
        request_id = uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        caller = format_caller(request)
        started = time.perf_counter()

        logger.debug(f"[{request_id}] {request.method} {request.url} from {caller}")

        response = await call_next(request)

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} from {caller} -> "
            f"{response.status_code} ({time.perf_counter() - started:.3f}s)"
        )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(InvalidFormatError)
    async def invalid_format_handler(request: Request, exc: InvalidFormatError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Invalid format error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "INVALID_FORMAT"}
        )

    @app.exception_handler(UnsupportedMethodError)
    async def unsupported_method_handler(request: Request, exc: UnsupportedMethodError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Unsupported method: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "UNSUPPORTED_METHOD"}
        )

    @app.exception_handler(ReadAbortedError)
    async def read_aborted_handler(request: Request, exc: ReadAbortedError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Read aborted error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "code": "READ_ABORTED"}
        )

    @app.exception_handler(BandwidthTestError)
    async def bandwidth_test_exception_handler(request: Request, exc: BandwidthTestError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Internal error: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "code": "INTERNAL_ERROR"}
        )

    app.include_router(transfer_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "Bandwidth Test Server", "status": "running"}

    @app.get("/health")
    async def health_check():
        """
        Liveness check. Also reports the configured segment size.
        """
        return {"status": "healthy", "segment_size": config.chunk_size}

    return app


def run_server(config: ServerConfig) -> None:
    """
    Start the HTTP listener with uvicorn. Blocks until shutdown.
    """
    logger.info(f"Using segment size {config.chunk_size}")
    logger.info(f"Listening on {config.listen_address}")
    uvicorn.run(create_app(config), host=config.host, port=config.port)
