"""Request handler that serves files beneath a root directory."""

from __future__ import annotations

import logging
import os
from email.utils import formatdate
from pathlib import Path

from config import INDEX_FILES
from request import HTTPRequest
from response import HTTPResponse
from utils import get_content_type, resolve_request_path

logger = logging.getLogger(__name__)


class StaticFileHandler:
    """Map each request path to a file under root_dir and build the response."""

    def __init__(self, root_dir: str | Path, index_files: tuple[str, ...] = INDEX_FILES) -> None:
        self.root_dir = Path(root_dir)
        self.index_files = index_files

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        file_path = resolve_request_path(request.path, self.root_dir, self.index_files)
        if file_path is None:
            logger.warning("Rejected path outside root: %s", request.path)
            return HTTPResponse(status_code=404)

        try:
            is_file = file_path.is_file()
        except OSError as exc:
            logger.warning("Unusable path %s: %s", request.path, exc)
            return HTTPResponse(status_code=404)
        if not is_file:
            return HTTPResponse(status_code=404)

        try:
            file_obj = file_path.open("rb")
        except OSError:
            logger.exception("Could not open %s", file_path)
            return HTTPResponse(status_code=500)

        try:
            file_stat = os.fstat(file_obj.fileno())
        except OSError:
            file_obj.close()
            logger.exception("Could not stat %s", file_path)
            return HTTPResponse(status_code=500)

        return HTTPResponse(
            status_code=200,
            headers={
                "Content-Type": get_content_type(file_path),
                "Date": formatdate(timeval=None, localtime=False, usegmt=True),
                "Last-Modified": formatdate(file_stat.st_mtime, usegmt=True),
            },
            file_obj=file_obj,
            content_length_override=file_stat.st_size,
        )
