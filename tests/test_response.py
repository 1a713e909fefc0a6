"""Unit tests for HTTP response serialization."""

import io

import pytest

from response import HTTPResponse, iter_file_chunks


def test_response_serialization_sets_length_and_default_content_type() -> None:
    response = HTTPResponse(status_code=200, body="hello")

    raw = response.to_bytes()

    assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b"Content-Type: text/plain; charset=utf-8\r\n" in raw
    assert b"Content-Length: 5\r\n" in raw
    assert b"Date: " in raw
    assert raw.endswith(b"\r\n\r\nhello")


def test_empty_not_found_has_zero_length_and_no_content_type() -> None:
    raw = HTTPResponse(status_code=404).to_bytes()

    assert raw.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert b"Content-Length: 0\r\n" in raw
    assert b"Content-Type" not in raw
    assert raw.endswith(b"\r\n\r\n")


def test_file_response_streams_file_object() -> None:
    response = HTTPResponse(
        status_code=200,
        headers={"Content-Type": "text/css"},
        file_obj=io.BytesIO(b"body{}"),
        content_length_override=6,
    )

    raw = response.to_bytes()

    assert b"Content-Type: text/css\r\n" in raw
    assert b"Content-Length: 6\r\n" in raw
    assert raw.endswith(b"\r\n\r\nbody{}")


def test_file_response_requires_content_length() -> None:
    with pytest.raises(ValueError):
        HTTPResponse(status_code=200, file_obj=io.BytesIO(b"x"))


def test_without_body_keeps_headers_and_length_and_closes_file() -> None:
    file_obj = io.BytesIO(b"<h1>Hi</h1>")
    response = HTTPResponse(
        status_code=200,
        headers={"Content-Type": "text/html"},
        file_obj=file_obj,
        content_length_override=11,
    )

    head_only = response.without_body()
    raw = head_only.to_bytes()

    assert file_obj.closed
    assert b"Content-Type: text/html\r\n" in raw
    assert b"Content-Length: 11\r\n" in raw
    assert raw.endswith(b"\r\n\r\n")


def test_iter_file_chunks_respects_chunk_size() -> None:
    chunks = [bytes(chunk) for chunk in iter_file_chunks(io.BytesIO(b"abcdefghij"), 4)]

    assert chunks == [b"abcd", b"efgh", b"ij"]
