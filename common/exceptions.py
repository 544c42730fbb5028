"""Exception classes shared by the server and client roles."""

from typing import Optional


class BandwidthTestError(Exception):
    """
    Base exception class for all bandwidth test errors.
    """
    pass


class InvalidFormatError(BandwidthTestError):
    """
    Raised when a size string does not match the size grammar
    (digits followed by at most one of b, B, k, K, m, M, g, G).
    """
    pass


class TransportError(BandwidthTestError):
    """
    Raised when the HTTP connection to the remote side fails.
    """
    pass


class UnexpectedStatusError(BandwidthTestError):
    """
    Raised when the remote side answers with a non-success status.
    """

    def __init__(self, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(f"Returned HTTP status {status_code} {self.reason}".rstrip())


class WriteAbortedError(BandwidthTestError):
    """
    Raised when a transfer stops while bytes are being written.
    """
    pass


class ReadAbortedError(BandwidthTestError):
    """
    Raised when a transfer stops while bytes are being read.
    """
    pass


class UnsupportedMethodError(BandwidthTestError):
    """
    Raised when the upload endpoint is called with a method other than POST.
    """
    pass
