"""Configuration constants for the static file server."""

HOST: str = "0.0.0.0"
PORT: int = 80
SERVER_NAME: str = "StaticFileResponder/1.0"
INDEX_FILES: tuple[str, ...] = (
    "index.htm",
    "index.html",
    "default.htm",
    "default.html",
)
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"
READ_CHUNK_SIZE: int = 4096
WRITE_CHUNK_SIZE: int = 16 * 1024
LISTEN_BACKLOG: int = 128
ACCEPT_POLL_SECS: float = 0.2
SOCKET_TIMEOUT_SECS: int = 5
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 524_288
MAX_TARGET_LENGTH: int = 8_192
LOG_FORMAT: str = "plain"
EXIT_COMMAND: str = "/exit"
