"""Fixed-size, pre-filled buffer used as the unit of streamed I/O."""

from typing import Iterator

from common.constants import FILLER_BYTE


class Chunk:
    """
    Read-only block of filler bytes reused for every write of a transfer.

    The buffer is filled once at construction and never mutated, so a single
    instance can be shared by any number of concurrent transfers.
    """

    def __init__(self, size: int, fill: bytes = FILLER_BYTE):
        """
        Allocate and fill the chunk.

        Args:
            size: Chunk length in bytes, must be strictly positive
            fill: Single byte repeated across the buffer

        Raises:
            ValueError: If size is not positive or fill is not one byte
        """
        if size <= 0:
            raise ValueError(f"Chunk size must be positive, got {size}")
        if len(fill) != 1:
            raise ValueError("Fill value must be exactly one byte")

        self.size = size
        self._data = fill * size
        self._view = memoryview(self._data)

    def __len__(self) -> int:
        return self.size

    def head(self, count: int) -> memoryview:
        """
        Return a read-only view of the first ``count`` bytes.

        Args:
            count: Number of bytes, 0 <= count <= size

        Returns:
            memoryview over the chunk without copying
        """
        if count < 0 or count > self.size:
            raise ValueError(f"Cannot take {count} bytes from a {self.size}-byte chunk")
        return self._view[:count]

    def segments(self, total: int) -> Iterator[memoryview]:
        """
        Lazily produce exactly ``total`` bytes as chunk-sized views.

        Yields ``total // size`` full chunks followed by one partial chunk of
        ``total % size`` bytes. No zero-length partial is yielded.
        """
        if total < 0:
            raise ValueError(f"Transfer size must be non-negative, got {total}")

        full_chunks, remainder = divmod(total, self.size)
        for _ in range(full_chunks):
            yield self._view
        if remainder:
            yield self._view[:remainder]
