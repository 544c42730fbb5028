"""Lazily generated upload body."""

from typing import Iterator

from common.chunk import Chunk
from common.logging_config import get_logger

logger = get_logger(__name__)


class PayloadStream:
    """
    Request body of exactly ``total`` filler bytes, produced on demand.

    httpx pulls one segment at a time while it writes to the socket, so at
    most one chunk worth of payload is in flight regardless of ``total``.
    """

    def __init__(self, chunk: Chunk, total: int):
        if total < 0:
            raise ValueError(f"Payload size must be non-negative, got {total}")
        self.chunk = chunk
        self.total = total
        self.produced = 0

    def __iter__(self) -> Iterator[memoryview]:
        self.produced = 0
        for segment in self.chunk.segments(self.total):
            self.produced += len(segment)
            yield segment
        logger.debug(f"Payload producer finished after {self.produced} bytes")

    @property
    def complete(self) -> bool:
        return self.produced == self.total
