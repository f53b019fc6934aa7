from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from .errors import IOFailure, ResourceNotFound, attach_suppressed

CHUNK_SIZE = 1024 * 1024


class LocalFileSystem:
    """Filesystem access used by the assembler and the file scheme.

    Every OSError leaves this class as a ConcatenationError: a missing
    source is ResourceNotFound, anything else is IOFailure.
    """

    def exists(self, path: Path) -> bool:
        return path.exists()

    def open_read(self, path: Path) -> BinaryIO:
        try:
            return path.open("rb")
        except FileNotFoundError as e:
            raise ResourceNotFound(f"no such file: {path}") from e
        except OSError as e:
            raise IOFailure(f"Unable to read {path}: {e}") from e

    def open_write(self, path: Path, append: bool) -> BinaryIO:
        try:
            return path.open("ab" if append else "wb")
        except OSError as e:
            raise IOFailure(f"Unable to create file {path}: {e}") from e

    def make_parents(self, path: Path) -> None:
        parent = path.parent
        if parent.is_dir():
            return
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Unable to create directory {parent}: {e}") from e


def copy_stream(src: BinaryIO, dst: BinaryIO) -> int:
    """Copy src into dst chunk by chunk; returns the number of bytes copied."""
    total = 0
    while True:
        try:
            b = src.read(CHUNK_SIZE)
        except OSError as e:
            raise IOFailure(f"read failed: {e}") from e
        if not b:
            return total
        try:
            dst.write(b)
        except OSError as e:
            raise IOFailure(f"write failed: {e}") from e
        total += len(b)


def close_after_failure(stream: BinaryIO, failure: BaseException) -> None:
    # Never let a close error replace the failure that is propagating.
    try:
        stream.close()
    except Exception as e:
        attach_suppressed(failure, e)


def close_stream(stream: BinaryIO, what: str) -> None:
    try:
        stream.close()
    except OSError as e:
        raise IOFailure(f"Unable to close {what}: {e}") from e
