"""
File Access Service

Existence / size checks and bounded whole-file reads of paths that the
PathGuard has already approved. Callers must never hand this module an
unguarded path.

Read outcomes are values, not exceptions:
    ok         - content loaded, with size and MIME type
    not_found  - carries the requested locator and the expected path
    too_large  - carries the actual size; content is never read

The ceiling is inclusive: a file of exactly max_size bytes is read.
An OS-level refusal of an approved path raises FileAccessFailed.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Literal, Optional

from qalens import logging as qlog
from qalens.config_loader import MAX_FILE_SIZE
from qalens.errors import FileAccessFailed, NotFound, TooLarge


ReadStatus = Literal["ok", "not_found", "too_large"]

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: Dict[str, str] = {
    ".json": "application/json",
    ".html": "text/html",
    ".yml": "text/yaml",
    ".yaml": "text/yaml",
    ".txt": "text/plain",
    ".log": "text/plain",
    ".xml": "application/xml",
    ".js": "application/javascript",
    ".css": "text/css",
    ".md": "text/markdown",
}


def mime_type_for(path: Path | str) -> str:
    """MIME type from the file extension; unknown -> application/octet-stream."""
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


@dataclass(frozen=True)
class FileReadResult:
    """Runtime file descriptor. content is None unless status == 'ok'."""
    status: ReadStatus
    path: Path
    locator: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    content: Optional[str] = None
    max_size: int = MAX_FILE_SIZE

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def raise_for_status(self, *, label: str = "Resource") -> FileReadResult:
        """Convert a not_found / too_large outcome into the matching exception."""
        if self.status == "not_found":
            raise NotFound(self.locator or str(self.path), str(self.path), label=label)
        if self.status == "too_large":
            raise TooLarge(self.size or 0, self.max_size)
        return self


def _os_reason(e: OSError) -> str:
    # Never str(e): it embeds the absolute path
    return e.strerror or type(e).__name__


class FileAccessService:
    """Bounded reads, directory listings and writes under guarded paths."""

    def __init__(self, max_size: int = MAX_FILE_SIZE):
        self.max_size = max_size

    def read(self, path: Path, locator: Optional[str] = None) -> FileReadResult:
        """Read an approved path; OS failures raise FileAccessFailed."""
        try:
            if not path.is_file():
                return FileReadResult(status="not_found", path=path, locator=locator, max_size=self.max_size)

            size = path.stat().st_size
            if size > self.max_size:
                return FileReadResult(
                    status="too_large", path=path, locator=locator, size=size, max_size=self.max_size,
                )

            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            qlog.warn("file.read", "Read failed", path=str(path), error=_os_reason(e))
            raise FileAccessFailed("read", locator or path.name, _os_reason(e)) from e

        return FileReadResult(
            status="ok",
            path=path,
            locator=locator,
            size=size,
            mime_type=mime_type_for(path),
            content=content,
            max_size=self.max_size,
        )

    def list_directory(self, path: Path) -> list[str]:
        """Sorted entry names; a missing directory lists as empty."""
        try:
            if not path.is_dir():
                return []
            return sorted(entry.name for entry in path.iterdir())
        except OSError as e:
            qlog.warn("file.list", "Listing failed", path=str(path), error=_os_reason(e))
            raise FileAccessFailed("list", path.name, _os_reason(e)) from e

    def is_directory(self, path: Path, locator: Optional[str] = None) -> bool:
        try:
            return path.is_dir()
        except OSError as e:
            raise FileAccessFailed("inspect", locator or path.name, _os_reason(e)) from e

    def write_text(self, path: Path, content: str, locator: Optional[str] = None) -> int:
        """Write UTF-8 text, creating parents. Returns bytes written."""
        encoded = content.encode("utf-8")
        if len(encoded) > self.max_size:
            raise TooLarge(len(encoded), self.max_size)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(encoded)
        except OSError as e:
            qlog.warn("file.write", "Write failed", path=str(path), error=_os_reason(e))
            raise FileAccessFailed("write", locator or path.name, _os_reason(e)) from e
        return len(encoded)
