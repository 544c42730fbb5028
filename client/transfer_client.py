"""HTTP client running download (GET) and upload (POST) tests."""

import time
from typing import Optional

import httpx

from client.config import TestConfig
from client.payload import PayloadStream
from common.byte_size import parse_byte_count
from common.chunk import Chunk
from common.constants import UPLOAD_CONTENT_TYPE
from common.exceptions import (
    BandwidthTestError,
    ReadAbortedError,
    TransportError,
    UnexpectedStatusError,
    WriteAbortedError,
)
from common.logging_config import get_logger
from common.rate import format_rate
from common.types import TransferResult

logger = get_logger(__name__)


class TransferClient:
    """HTTP client for the bandwidth test server. No retries, no timeouts."""

    def __init__(self, config: TestConfig):
        """
        Initialize transfer client.

        Args:
            config: Test configuration; its chunk size sets both the upload
                segment size and the download read size
        """
        self.config = config
        self.chunk = Chunk(config.chunk_size)
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=None
        )
        logger.info(f"Initialized TransferClient [base_url={config.get_base_url()}]")

    def run_get_test(self, size: Optional[str] = None) -> Optional[TransferResult]:
        """
        Download ``size`` bytes and log the observed rate.

        Args:
            size: Size string (defaults to the configured GET size)

        Returns:
            TransferResult, or None if the test failed (the cause is logged)
        """
        size = size or self.config.get_size
        try:
            result = self._download(size)
        except BandwidthTestError as e:
            logger.error(f"GET test failed: {e}")
            return None

        logger.info(f"GET Rate: {format_rate(result.rate)}/sec")
        logger.info(
            f"GET received {result.bytes_transferred} bytes in {result.elapsed_seconds:.3f}s"
        )
        return result

    def run_post_test(self, size: Optional[str] = None) -> Optional[TransferResult]:
        """
        Upload ``size`` bytes and log the observed rate.

        Args:
            size: Size string (defaults to the configured POST size)

        Returns:
            TransferResult, or None if the test failed (the cause is logged)
        """
        size = size or self.config.post_size
        try:
            result = self._upload(size)
        except BandwidthTestError as e:
            logger.error(f"POST test failed: {e}")
            return None

        logger.info(f"POST Rate: {format_rate(result.rate)}/sec")
        logger.info(
            f"POST sent {result.bytes_transferred} bytes in {result.elapsed_seconds:.3f}s"
        )
        return result

    def _download(self, size: str) -> TransferResult:
        """
        Stream the download response, discarding the body.

        Raises:
            InvalidFormatError: Size string is malformed
            TransportError: Request could not be completed
            UnexpectedStatusError: Server answered with a non-200 status
            ReadAbortedError: Body ended or broke before ``size`` bytes arrived
        """
        expected = parse_byte_count(size)
        target = self.config.get_download_target()
        logger.info(f"Getting {target}?s={size}")

        received = 0
        body_started = False
        start_time = time.perf_counter()
        try:
            with self.session.stream('GET', target, params={'s': size}) as response:
                if response.status_code != 200:
                    response.read()
                    raise UnexpectedStatusError(response.status_code, response.reason_phrase)

                body_started = True
                for piece in response.iter_bytes(chunk_size=self.chunk.size):
                    received += len(piece)
        except httpx.HTTPError as e:
            if body_started:
                raise ReadAbortedError(
                    f"Download from {target} broke after {received} of {expected} bytes: {e}"
                )
            raise TransportError(f"GET {target} failed: {e}")
        elapsed = time.perf_counter() - start_time

        if received != expected:
            raise ReadAbortedError(
                f"Download from {target} ended after {received} of {expected} bytes"
            )

        return TransferResult(bytes_transferred=received, elapsed_seconds=elapsed)

    def _upload(self, size: str) -> TransferResult:
        """
        POST a lazily generated body of ``size`` bytes.

        Raises:
            InvalidFormatError: Size string is malformed
            TransportError: Request could not be completed
            WriteAbortedError: Body could not be fully sent
            UnexpectedStatusError: Server answered with a non-200 status
        """
        total = parse_byte_count(size)
        target = self.config.get_upload_target()
        payload = PayloadStream(self.chunk, total)
        headers = {
            'Content-Type': UPLOAD_CONTENT_TYPE,
            'Content-Length': str(total),
        }
        logger.info(f"Posting {total} bytes to '{target}'")

        start_time = time.perf_counter()
        try:
            response = self.session.post(target, content=payload, headers=headers)
        except httpx.WriteError as e:
            raise WriteAbortedError(
                f"Upload to {target} broke after {payload.produced} of {total} bytes: {e}"
            )
        except httpx.HTTPError as e:
            raise TransportError(f"POST {target} failed: {e}")
        elapsed = time.perf_counter() - start_time

        if response.status_code != 200:
            raise UnexpectedStatusError(response.status_code, response.reason_phrase)

        if not payload.complete:
            raise WriteAbortedError(
                f"Upload to {target} produced {payload.produced} of {total} bytes"
            )

        return TransferResult(bytes_transferred=total, elapsed_seconds=elapsed)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> 'TransferClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
