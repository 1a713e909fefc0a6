"""Utility helpers shared across server modules."""

from pathlib import Path
from types import MappingProxyType

from config import DEFAULT_CONTENT_TYPE, INDEX_FILES

MIME_TYPES = MappingProxyType(
    {
        ".avi": "video/x-msvideo",
        ".bin": "application/octet-stream",
        ".css": "text/css",
        ".dll": "application/octet-stream",
        ".exe": "application/octet-stream",
        ".gif": "image/gif",
        ".htm": "text/html",
        ".html": "text/html",
        ".ico": "image/x-icon",
        ".img": "application/octet-stream",
        ".jpeg": "image/jpeg",
        ".jpg": "image/jpeg",
        ".js": "application/x-javascript",
        ".mp3": "audio/mpeg",
        ".mpeg": "video/mpeg",
        ".mpg": "video/mpeg",
        ".pdf": "application/pdf",
        ".png": "image/png",
        ".rar": "application/x-rar-compressed",
        ".txt": "text/plain",
        ".xml": "text/xml",
        ".zip": "application/zip",
    }
)


def get_content_type(file_path: Path) -> str:
    return MIME_TYPES.get(file_path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def find_index_file(root_dir: Path, index_files: tuple[str, ...] = INDEX_FILES) -> str:
    """Return the first index file name present under root_dir, or ""."""
    for name in index_files:
        if (root_dir / name).is_file():
            return name
    return ""


def resolve_request_path(
    request_path: str,
    root_dir: str | Path,
    index_files: tuple[str, ...] = INDEX_FILES,
) -> Path | None:
    """Map a decoded request path onto root_dir or return None for traversal attempts.

    An empty relative path is replaced by the first existing index file. When
    no index file exists the root itself is returned, which callers treat as
    not found because it is not a regular file.
    """
    root = Path(root_dir).resolve()
    relative_path = request_path.removeprefix("/")
    if not relative_path:
        relative_path = find_index_file(root, index_files)

    candidate = (root / relative_path).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        return None

    return candidate
