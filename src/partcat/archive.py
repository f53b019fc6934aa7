"""Single-entry lookup inside zip/jar containers.

The container arrives as an open binary stream (usually straight from the
artifact store). Entries are scanned in archive order and compared to the
requested path by exact name; only the matching entry is ever decompressed.
"""

from __future__ import annotations

import io
import logging
import shutil
import tempfile
import zipfile
import zlib
from contextlib import ExitStack
from typing import BinaryIO

from .errors import MalformedArchive, ResourceNotFound, attach_suppressed
from .fs import CHUNK_SIZE

logger = logging.getLogger(__name__)

# Errors zipfile raises for damaged containers or entry data.
_ZIP_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


class ArchiveEntryStream(io.RawIOBase):
    """Reads one archive entry; closing it releases the archive and its source."""

    def __init__(self, entry: BinaryIO, resources: ExitStack, name: str) -> None:
        super().__init__()
        self._entry = entry
        self._resources = resources
        self.name = name

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        try:
            data = self._entry.read(len(buffer))
        except _ZIP_ERRORS as e:
            raise MalformedArchive(f"Corrupt archive entry {self.name!r}: {e}") from e
        n = len(data)
        buffer[:n] = data
        return n

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._resources.close()
        finally:
            super().close()


def _seekable(source: BinaryIO) -> BinaryIO:
    try:
        if source.seekable():
            return source
    except (AttributeError, ValueError):
        pass
    # The zip directory sits at the end of the container; spool one-pass streams.
    spool = tempfile.SpooledTemporaryFile(max_size=CHUNK_SIZE)
    try:
        shutil.copyfileobj(source, spool, CHUNK_SIZE)
        spool.seek(0)
    except BaseException:
        spool.close()
        raise
    finally:
        source.close()
    return spool  # type: ignore[return-value]


def find_entry(source: BinaryIO, entry_path: str, container: str = "archive") -> BinaryIO:
    """Return a stream over `entry_path` inside the zip read from `source`.

    Ownership of `source` passes to this function: it is closed on every
    failure, and by the returned stream once the caller closes that.
    """

    resources = ExitStack()
    try:
        resources.callback(source.close)
        stream = _seekable(source)
        if stream is not source:
            resources.callback(stream.close)

        try:
            zf = zipfile.ZipFile(stream)
        except _ZIP_ERRORS as e:
            raise MalformedArchive(f"{container} is not a valid zip archive: {e}") from e
        resources.callback(zf.close)

        try:
            for info in zf.infolist():
                if info.filename != entry_path:
                    continue
                logger.debug("found %s in %s (%d bytes)", entry_path, container, info.file_size)
                entry = zf.open(info)
                resources.callback(entry.close)
                return ArchiveEntryStream(entry, resources, entry_path)
        except _ZIP_ERRORS as e:
            raise MalformedArchive(f"Unable to read {entry_path!r} from {container}: {e}") from e

        raise ResourceNotFound(f"Artifact '{container}' does not contain '{entry_path}'")
    except BaseException as e:
        try:
            resources.close()
        except Exception as secondary:
            attach_suppressed(e, secondary)
        raise
