"""Download and upload test endpoints."""

import math
import time
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from starlette.requests import ClientDisconnect

from common.byte_size import parse_byte_count
from common.chunk import Chunk
from common.constants import DOWNLOAD_PATH, UPLOAD_CONTENT_TYPE, UPLOAD_PATH
from common.exceptions import InvalidFormatError, ReadAbortedError, UnsupportedMethodError
from common.logging_config import get_logger
from common.rate import format_rate
from common.types import TransferResult
from server.schemas import ErrorResponse, UploadReport

logger = get_logger(__name__)

router = APIRouter(tags=["Transfer"])


def get_chunk(request: Request) -> Chunk:
    """
    Shared read-only chunk created by the app factory.
    """
    return request.app.state.chunk


def format_caller(request: Request) -> str:
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


def stream_download(chunk: Chunk, total: int, caller: str) -> Iterator[memoryview]:
    """
    Yield exactly ``total`` filler bytes and log the outcome.

    Each yield returns only after the previous segment was handed to the
    server, so the byte count and timing reflect what was actually written.
    If the consumer goes away the generator is closed and the partial count
    is logged.

    Args:
        chunk: Shared chunk to slice segments from
        total: Number of bytes to send
        caller: Client address for log messages

    Yields:
        Full chunk views followed by one truncated view for the remainder
    """
    sent = 0
    start_time = time.perf_counter()
    completed = False
    try:
        for segment in chunk.segments(total):
            yield segment
            sent += len(segment)
        completed = True
    finally:
        elapsed = time.perf_counter() - start_time
        if completed:
            result = TransferResult(bytes_transferred=sent, elapsed_seconds=elapsed)
            logger.info(
                f"Sent {sent} bytes to {caller} at {format_rate(result.rate)}/sec "
                f"in {elapsed:.3f}s"
            )
        else:
            logger.warning(
                f"Download to {caller} aborted after {sent} of {total} bytes "
                f"({elapsed:.3f}s)"
            )


@router.get(
    DOWNLOAD_PATH,
    response_class=StreamingResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def download(
    request: Request,
    s: Optional[str] = Query(None, description="Number of bytes, e.g. 1g, 20M, 123412"),
    chunk: Chunk = Depends(get_chunk),
):
    """
    Download test: respond with exactly the requested number of bytes.

    Parameters:
        - s: Size matching ``[0-9]+[bBkKmMgG]?``. Lowercase units are binary
             (k=1024), uppercase are decimal (K=1000).

    Raises:
        - 400: Missing or malformed size
        - 500: Internal error while preparing the transfer
    """
    if s is None:
        raise InvalidFormatError("Missing size parameter 's'")

    num_bytes = parse_byte_count(s)
    caller = format_caller(request)
    logger.info(f"Sending {num_bytes} bytes to {caller}")

    return StreamingResponse(
        stream_download(chunk, num_bytes, caller),
        media_type=UPLOAD_CONTENT_TYPE,
        headers={"Content-Length": str(num_bytes)},
    )


@router.api_route(
    UPLOAD_PATH,
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    response_model=UploadReport,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def upload(request: Request) -> UploadReport:
    """
    Upload test: read and discard the request body, counting bytes.

    Only POST is accepted; any other method is a client error.

    Returns:
        - bytes_received: Total body size
        - elapsed_seconds: Time spent reading the body
        - rate: Bytes per second (null when the elapsed time is zero)

    Raises:
        - 400: Method other than POST
        - 500: Body stream broke before end-of-stream
    """
    if request.method != "POST":
        raise UnsupportedMethodError(f"Upload requires POST, got {request.method}")

    caller = format_caller(request)
    received = 0
    start_time = time.perf_counter()
    try:
        async for piece in request.stream():
            received += len(piece)
    except ClientDisconnect:
        raise ReadAbortedError(f"Upload from {caller} aborted after {received} bytes")

    elapsed = time.perf_counter() - start_time
    result = TransferResult(bytes_transferred=received, elapsed_seconds=elapsed)
    logger.info(
        f"Received {received} bytes from {caller} at {format_rate(result.rate)}/sec "
        f"in {elapsed:.3f}s"
    )

    return UploadReport(
        bytes_received=received,
        elapsed_seconds=elapsed,
        rate=result.rate if math.isfinite(result.rate) else None,
    )
