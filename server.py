"""Static file server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import sys
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from config import (
    ACCEPT_POLL_SECS,
    EXIT_COMMAND,
    HOST,
    LISTEN_BACKLOG,
    LOG_FORMAT,
    PORT,
    SOCKET_TIMEOUT_SECS,
)
from handlers.static_files import StaticFileHandler
from request import HTTPRequest, HTTPRequestParseError
from response import REASON_PHRASES, HTTPResponse
from socket_handler import HTTPReadError, read_http_request, write_http_response_message

logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


class ServerBindError(RuntimeError):
    """Raised when the listening socket cannot be bound."""


class HTTPServer:
    """Single-threaded static file server.

    Connections are accepted and answered one at a time. ``stop()`` is
    graceful: the connection being served is finished before the listener
    closes.
    """

    def __init__(
        self,
        root_dir: str | Path,
        host: str = HOST,
        port: int = PORT,
        handler: Handler | None = None,
        *,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.host = host
        self.port = port
        self.handler = handler or StaticFileHandler(self.root_dir)
        self.log_format = log_format

        self._server_socket: socket.socket | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_listening(self) -> bool:
        return self._server_socket is not None

    def start(self) -> None:
        """Bind and serve in the calling thread until stop() is called."""
        self._bind()
        self._serve()

    def start_background(self) -> threading.Thread:
        """Bind in the calling thread, then serve on a dedicated thread."""
        self._bind()
        self._thread = threading.Thread(
            target=self._serve,
            name="static-file-server",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            self._thread = None

    def _bind(self) -> None:
        server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
        except OSError as exc:
            server_socket.close()
            reason = exc.strerror or str(exc)
            raise ServerBindError(
                f"Cannot listen on {self.host}:{self.port}: {reason}"
            ) from exc

        server_socket.settimeout(ACCEPT_POLL_SECS)
        self._stop_event.clear()
        self._server_socket = server_socket
        self.port = server_socket.getsockname()[1]
        logger.info("Serving %s on %s:%s", self.root_dir, self.host, self.port)

    def _serve(self) -> None:
        server_socket = self._server_socket
        if server_socket is None:
            raise RuntimeError("Server socket is not bound")

        try:
            while not self._stop_event.is_set():
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    logger.exception("Accept failed, shutting down listener")
                    break

                self._handle_client(client_socket, address)
        finally:
            server_socket.close()
            self._server_socket = None
            logger.info("Server on port %s stopped", self.port)

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            client_socket.settimeout(SOCKET_TIMEOUT_SECS)
            started_at = time.perf_counter()

            try:
                raw_request = read_http_request(client_socket)
            except HTTPReadError as exc:
                logger.warning("Could not read request from %s: %s", address[0], exc)
                self._send_error(client_socket, address, exc.status_code, started_at)
                return
            except OSError as exc:
                logger.warning("Connection error from %s: %s", address[0], exc)
                return

            if not raw_request:
                return

            try:
                request = HTTPRequest.from_bytes(raw_request)
            except HTTPRequestParseError as exc:
                logger.warning("Rejected request from %s: %s", address[0], exc)
                self._send_error(client_socket, address, exc.status_code, started_at)
                return

            self._log_request(request, address)
            response = self._dispatch(request)
            try:
                bytes_sent = write_http_response_message(client_socket, response)
            except OSError as exc:
                logger.warning(
                    "Failed writing response for %s to %s: %s",
                    request.path,
                    address[0],
                    exc,
                )
                return
            finally:
                response.close()

            self._log_response(
                address=address,
                method=request.method,
                path=request.path,
                response=response,
                payload_size=bytes_sent,
                started_at=started_at,
            )

    def _send_error(
        self,
        client_socket: socket.socket,
        address: tuple[str, int],
        status_code: int,
        started_at: float,
    ) -> None:
        response = HTTPResponse(
            status_code=status_code,
            headers={"Connection": "close"},
            body=REASON_PHRASES.get(status_code, "Bad Request"),
        )
        try:
            bytes_sent = write_http_response_message(client_socket, response)
        except OSError:
            return
        self._log_response(
            address=address,
            method="-",
            path="-",
            response=response,
            payload_size=bytes_sent,
            started_at=started_at,
        )

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        try:
            response = self.handler(request)
        except Exception:
            logger.exception("Unhandled error in request handler")
            response = HTTPResponse(status_code=500)

        response.headers.setdefault("Connection", "close")
        if request.method == "HEAD":
            return response.without_body()
        return response

    def _log_request(self, request: HTTPRequest, address: tuple[str, int]) -> None:
        self._emit(
            {
                "event": "request",
                "client": address[0],
                "method": request.method,
                "url": request.raw_target,
                "user_agent": request.user_agent or "-",
                "accept": ",".join(request.accept_types) or "-",
            }
        )

    def _log_response(
        self,
        *,
        address: tuple[str, int],
        method: str,
        path: str,
        response: HTTPResponse,
        payload_size: int,
        started_at: float,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event: dict[str, object] = {
            "event": "response",
            "client": address[0],
            "method": method,
            "path": path,
            "status": response.status_code,
            "bytes_out": payload_size,
            "latency_ms": round(duration_ms, 3),
        }
        if response.status_code == 200:
            event["date"] = response.headers.get("Date", "-")
            event["last_modified"] = response.headers.get("Last-Modified", "-")
            event["content_type"] = response.headers.get("Content-Type", "-")
            event["content_length"] = response.content_length_override
        self._emit(event)

    def _emit(self, event: dict[str, object]) -> None:
        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return
        logger.info(" ".join(f"{key}={value}" for key, value in event.items()))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve static files from a directory")
    parser.add_argument("--root", help="directory to serve; prompted for when omitted")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    return parser.parse_args(argv)


def main(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout
    args = _parse_args(argv)

    root_dir = args.root
    if root_dir is None:
        print("Specify the folder with your web-application:", file=stdout)
        root_dir = stdin.readline().rstrip("\r\n")
    exit_hint = f"Enter '{EXIT_COMMAND}' to close the server..."
    print(exit_hint + "\n", file=stdout)

    server = HTTPServer(
        root_dir,
        host=args.host,
        port=args.port,
        log_format=args.log_format,
    )
    try:
        server.start_background()
    except ServerBindError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        for line in stdin:
            if line.rstrip("\r\n") == EXIT_COMMAND:
                break
            print(exit_hint, file=stdout)
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
    return 0


def run() -> None:
    logging.basicConfig(level=logging.INFO, stream=sys.stdout)
    sys.exit(main())


if __name__ == "__main__":
    run()
