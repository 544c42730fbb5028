"""Project-wide constants (default sizes, ports, HTTP paths)."""

DEFAULT_LISTEN_ADDRESS: str = "0.0.0.0:8080"
DEFAULT_SEGMENT_SIZE: int = 10 * 1024 * 1024  # 10 MiB write/read unit
DEFAULT_MODE: str = "server"

DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 8080
DEFAULT_GET_SIZE: str = "1g"
DEFAULT_POST_SIZE: str = "1g"

DOWNLOAD_PATH: str = "/down"
UPLOAD_PATH: str = "/up"
UPLOAD_CONTENT_TYPE: str = "application/octet-stream"

FILLER_BYTE: bytes = b"1"

INT64_MAX: int = 2 ** 63 - 1
