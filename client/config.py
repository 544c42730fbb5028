"""Configuration for one client test invocation."""

import os
from dataclasses import dataclass
from typing import Optional

from common.constants import (
    DEFAULT_GET_SIZE,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_POST_SIZE,
    DEFAULT_SEGMENT_SIZE,
    DOWNLOAD_PATH,
    UPLOAD_PATH,
)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class TestConfig:
    """
    Client test settings. Immutable for the duration of one invocation.

    ``get_url``/``post_url`` replace the URL derived from host and port when
    set; the ``s`` query parameter is always taken from ``get_size``.
    """
    __test__ = False

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    get_size: str = DEFAULT_GET_SIZE
    post_size: str = DEFAULT_POST_SIZE
    run_get: bool = True
    run_post: bool = True
    parallel: bool = True
    chunk_size: int = DEFAULT_SEGMENT_SIZE
    get_url: Optional[str] = None
    post_url: Optional[str] = None

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"Segment size must be positive, got {self.chunk_size}")

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8080")
        """
        return f"http://{self.host}:{self.port}"

    def get_download_target(self) -> str:
        """Absolute override or the download path relative to the base URL."""
        return self.get_url or DOWNLOAD_PATH

    def get_upload_target(self) -> str:
        """Absolute override or the upload path relative to the base URL."""
        return self.post_url or UPLOAD_PATH

    @classmethod
    def from_env(cls) -> 'TestConfig':
        """Load client configuration from BWTEST_* environment variables."""
        return cls(
            host=os.environ.get("BWTEST_HOST", DEFAULT_HOST),
            port=int(os.environ.get("BWTEST_PORT", str(DEFAULT_PORT))),
            get_size=os.environ.get("BWTEST_GET_SIZE", DEFAULT_GET_SIZE),
            post_size=os.environ.get("BWTEST_POST_SIZE", DEFAULT_POST_SIZE),
            run_get=_env_flag("BWTEST_RUN_GET", True),
            run_post=_env_flag("BWTEST_RUN_POST", True),
            parallel=_env_flag("BWTEST_PARALLEL", True),
            chunk_size=int(os.environ.get("BWTEST_SEGMENT_SIZE", str(DEFAULT_SEGMENT_SIZE))),
            get_url=os.environ.get("BWTEST_GET_URL") or None,
            post_url=os.environ.get("BWTEST_POST_URL") or None,
        )
