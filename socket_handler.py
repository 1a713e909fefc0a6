"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket

from config import MAX_BODY_BYTES, MAX_HEADER_BYTES, READ_CHUNK_SIZE, WRITE_CHUNK_SIZE
from response import HTTPResponse, iter_file_chunks, prepare_response


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""

    status_code = 400


class MalformedRequestError(HTTPReadError):
    """Raised when socket bytes do not form a complete HTTP request."""


class HeaderTooLargeError(HTTPReadError):
    """Raised when HTTP headers exceed configured maximum size."""

    status_code = 431


class PayloadTooLargeError(HTTPReadError):
    """Raised when request body exceeds configured maximum size."""

    status_code = 413


class SocketTimeoutError(HTTPReadError):
    """Raised when a client times out while sending request bytes."""

    status_code = 408


def _extract_content_length(header_bytes: bytes) -> int:
    headers = header_bytes.decode("iso-8859-1").split("\r\n")
    for line in headers[1:]:
        if not line:
            continue
        if ":" not in line:
            raise MalformedRequestError("Malformed header while reading request")
        name, value = line.split(":", 1)
        if name.strip().lower() == "content-length":
            try:
                parsed_length = int(value.strip())
            except ValueError as exc:
                raise MalformedRequestError("Invalid Content-Length header") from exc
            if parsed_length < 0:
                raise MalformedRequestError("Negative Content-Length header")
            return parsed_length
    return 0


def extract_http_request_message(buffer: bytes) -> bytes | None:
    """Extract one complete HTTP request from a bytes buffer, if present."""
    header_end_index = buffer.find(b"\r\n\r\n")
    if header_end_index == -1:
        if len(buffer) > MAX_HEADER_BYTES:
            raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")
        return None

    if header_end_index + 4 > MAX_HEADER_BYTES:
        raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")

    expected_body_length = _extract_content_length(buffer[:header_end_index])
    if expected_body_length > MAX_BODY_BYTES:
        raise PayloadTooLargeError("Body exceeded MAX_BODY_BYTES")

    request_length = header_end_index + 4 + expected_body_length
    if len(buffer) < request_length:
        return None
    return buffer[:request_length]


def read_http_request(client_socket: socket.socket) -> bytes:
    """Read one HTTP request; returns b"" when the peer sent nothing at all."""
    buffer = bytearray()

    while True:
        request_bytes = extract_http_request_message(bytes(buffer))
        if request_bytes is not None:
            return request_bytes

        try:
            chunk = client_socket.recv(READ_CHUNK_SIZE)
        except socket.timeout as exc:
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc

        if not chunk:
            if not buffer:
                return b""
            raise MalformedRequestError("Connection closed before request completed")

        buffer.extend(chunk)


def write_http_response_message(
    client_socket: socket.socket,
    response: HTTPResponse,
    *,
    write_chunk_size: int = WRITE_CHUNK_SIZE,
) -> int:
    """Write an HTTPResponse, copying file bodies through a fixed-size buffer."""
    prepared = prepare_response(response)
    bytes_sent = 0
    client_socket.sendall(prepared.head)
    bytes_sent += len(prepared.head)

    if prepared.body is not None:
        if prepared.body:
            client_socket.sendall(prepared.body)
            bytes_sent += len(prepared.body)
        return bytes_sent

    if prepared.file_obj is not None:
        for chunk in iter_file_chunks(prepared.file_obj, write_chunk_size):
            client_socket.sendall(chunk)
            bytes_sent += len(chunk)

    return bytes_sent
