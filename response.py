"""HTTP response model and serializer."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import BinaryIO

from config import SERVER_NAME, WRITE_CHUNK_SIZE

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    408: "Request Timeout",
    413: "Payload Too Large",
    414: "URI Too Long",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    505: "HTTP Version Not Supported",
}


@dataclass(slots=True)
class PreparedResponse:
    head: bytes
    body: bytes | None = None
    file_obj: BinaryIO | None = None


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    reason_phrase: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    file_obj: BinaryIO | None = None
    content_length_override: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if self.file_obj is not None and self.body:
            raise ValueError("Response cannot set both body and file_obj")
        if self.file_obj is not None and self.content_length_override is None:
            raise ValueError("File responses need an explicit content length")

    def close(self) -> None:
        if self.file_obj is not None:
            self.file_obj.close()
            self.file_obj = None

    def without_body(self) -> "HTTPResponse":
        """Return a copy with the same head and no payload, for HEAD requests."""
        content_length = self.content_length_override
        if content_length is None:
            content_length = len(self.body)
        self.close()
        return HTTPResponse(
            status_code=self.status_code,
            reason_phrase=self.reason_phrase,
            headers=dict(self.headers),
            body=b"",
            content_length_override=content_length,
        )

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        prepared = prepare_response(self)
        payload = bytearray(prepared.head)
        if prepared.body is not None:
            payload.extend(prepared.body)
            return bytes(payload)

        if prepared.file_obj is not None:
            for chunk in iter_file_chunks(prepared.file_obj):
                payload.extend(chunk)

        return bytes(payload)


def prepare_response(response: HTTPResponse) -> PreparedResponse:
    reason = response.reason_phrase or REASON_PHRASES.get(response.status_code, "Unknown")
    normalized_headers = dict(response.headers)
    normalized_headers.setdefault(
        "Date",
        formatdate(timeval=None, localtime=False, usegmt=True),
    )
    normalized_headers.setdefault("Server", SERVER_NAME)
    if response.body:
        normalized_headers.setdefault("Content-Type", "text/plain; charset=utf-8")

    body: bytes | None = None
    file_obj: BinaryIO | None = None
    content_length = response.content_length_override
    if response.file_obj is not None:
        file_obj = response.file_obj
    else:
        body = response.body
        if content_length is None:
            content_length = len(body)
    normalized_headers["Content-Length"] = str(content_length)

    header_lines = [f"HTTP/1.1 {response.status_code} {reason}"]
    header_lines.extend(f"{key}: {value}" for key, value in normalized_headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"
    return PreparedResponse(head=head, body=body, file_obj=file_obj)


def iter_file_chunks(
    file_obj: BinaryIO,
    chunk_size: int = WRITE_CHUNK_SIZE,
) -> Iterator[memoryview]:
    """Yield a file's bytes through one reused fixed-size buffer."""
    buffer = bytearray(chunk_size)
    view = memoryview(buffer)
    while True:
        count = file_obj.readinto(buffer)
        if not count:
            return
        yield view[:count]
