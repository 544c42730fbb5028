"""Configuration settings for the bandwidth test server."""

import os
from dataclasses import dataclass
from typing import Tuple

from common.constants import DEFAULT_LISTEN_ADDRESS, DEFAULT_SEGMENT_SIZE


def split_listen_address(listen_address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    Args:
        listen_address: Address such as ``0.0.0.0:8080`` or ``[::]:8080``

    Returns:
        Tuple of (host, port)

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port = listen_address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address: {listen_address!r} (expected host:port)")

    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"Port out of range in listen address: {listen_address!r}")

    host = host.strip('[]') or '0.0.0.0'
    return host, port_number


@dataclass(frozen=True)
class ServerConfig:
    """
    Server settings, built once at startup and passed into the app factory.
    """
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    chunk_size: int = DEFAULT_SEGMENT_SIZE

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"Segment size must be positive, got {self.chunk_size}")
        split_listen_address(self.listen_address)

    @property
    def host(self) -> str:
        return split_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return split_listen_address(self.listen_address)[1]

    @classmethod
    def from_env(cls) -> 'ServerConfig':
        """Load server configuration from BWTEST_* environment variables."""
        return cls(
            listen_address=os.environ.get("BWTEST_LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
            chunk_size=int(os.environ.get("BWTEST_SEGMENT_SIZE", str(DEFAULT_SEGMENT_SIZE))),
        )
