from __future__ import annotations

"""Range-aware file serving.

Turns a served file plus an optional single byte range into the status,
headers and body of the response. Knows nothing about the catalogue; the
caller decides which files may be served.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO

from movie_nexus.util.byte_range import ByteRange, Last, StartingAt

CHUNK_SIZE = 64 * 1024

mimetypes.add_type("text/vtt", ".vtt")


class FileServeError(RuntimeError):
    pass


@dataclass
class FileResponsePlan:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Iterator[bytes] | None = None


def is_satisfiable(byte_range: ByteRange, file_len: int) -> bool:
    if isinstance(byte_range, StartingAt):
        return byte_range.start < file_len
    if isinstance(byte_range, Last):
        return 0 < byte_range.length <= file_len
    return byte_range.start <= byte_range.end < file_len


def resolve_bounds(byte_range: ByteRange, file_len: int) -> tuple[int, int]:
    """Inclusive ``(start, end)`` of a range already known to be satisfiable."""
    if isinstance(byte_range, StartingAt):
        return byte_range.start, file_len - 1
    if isinstance(byte_range, Last):
        return file_len - byte_range.length, file_len - 1
    return byte_range.start, byte_range.end


def _open_at(path: Path, byte_range: ByteRange | None) -> BinaryIO:
    handle = open(path, "rb")
    try:
        if isinstance(byte_range, Last):
            handle.seek(-byte_range.length, os.SEEK_END)
        elif byte_range is not None:
            handle.seek(byte_range.start)
    except OSError:
        handle.close()
        raise
    return handle


class FileChunks:
    """Iterator over at most ``limit`` bytes of an open file.

    Owns the handle: it is closed at end of data or on ``close()``.
    """

    def __init__(self, handle: BinaryIO, limit: int) -> None:
        self._handle = handle
        self._remaining = limit

    def __iter__(self) -> "FileChunks":
        return self

    def __next__(self) -> bytes:
        if self._remaining <= 0 or self._handle.closed:
            self.close()
            raise StopIteration
        chunk = self._handle.read(min(CHUNK_SIZE, self._remaining))
        if not chunk:
            self.close()
            raise StopIteration
        self._remaining -= len(chunk)
        return chunk

    def close(self) -> None:
        self._handle.close()

    @property
    def closed(self) -> bool:
        return self._handle.closed


def guess_content_type(path: Path) -> str | None:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type


def prepare_file_response(path: Path, byte_range: ByteRange | None) -> FileResponsePlan:
    try:
        file_len = path.stat().st_size
    except OSError as exc:
        raise FileServeError(f"Cannot stat {path}: {exc}") from exc

    plan = FileResponsePlan(status_code=200, headers={"Accept-Ranges": "bytes"})
    start, end = 0, file_len - 1
    if byte_range is not None:
        if not is_satisfiable(byte_range, file_len):
            plan.status_code = 416
            plan.headers["Content-Range"] = f"bytes */{file_len}"
            return plan
        start, end = resolve_bounds(byte_range, file_len)
        plan.status_code = 206
        plan.headers["Content-Range"] = f"bytes {start}-{end}/{file_len}"

    try:
        handle = _open_at(path, byte_range)
    except OSError as exc:
        raise FileServeError(f"Cannot open {path}: {exc}") from exc

    # Never more than Content-Length, even if the file grows mid-stream.
    plan.body = FileChunks(handle, end - start + 1)
    plan.headers["Content-Length"] = str(end - start + 1)
    content_type = guess_content_type(path)
    if content_type is not None:
        plan.headers["Content-Type"] = content_type
    return plan
