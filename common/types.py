"""Shared data type definitions (TransferResult, TestReport)."""

from dataclasses import dataclass
from typing import Optional

from common.rate import compute_rate, format_rate


@dataclass(frozen=True)
class TransferResult:
    """
    Outcome of one completed transfer.
    """
    bytes_transferred: int
    elapsed_seconds: float

    @property
    def rate(self) -> float:
        """Throughput in bytes per second."""
        return compute_rate(self.bytes_transferred, self.elapsed_seconds)

    def describe(self) -> str:
        return (
            f"{format_rate(self.rate)}/sec "
            f"({self.bytes_transferred} bytes in {self.elapsed_seconds:.3f}s)"
        )


@dataclass(frozen=True)
class TestReport:
    """
    Results of one client invocation. A test that was disabled or failed
    has no result.
    """
    __test__ = False

    get: Optional[TransferResult] = None
    post: Optional[TransferResult] = None
