from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidTask
from .fs import LocalFileSystem, close_after_failure, close_stream, copy_stream
from .resolver import UriPartResolver
from .task import ConcatenationTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyResult:
    destination: Path
    skipped: bool
    parts_written: int = 0
    bytes_written: int = 0


def destination_path(output_root: Path, destination: str | None) -> Path:
    if not destination:
        raise InvalidTask("File name is not provided")
    root = Path(output_root).resolve()
    out = (root / destination).resolve()
    if out == root or root not in out.parents:
        raise InvalidTask(f"File {destination!r} resolves outside of output directory {root}")
    return out


class FileAssembler:
    """Builds one destination file from its parts.

    Order of operations per task:
      1) validate destination (non-empty, inside the output root)
      2) skip if requested and the destination exists (wins over append)
      3) create parent directories
      4) open destination (truncate, or append)
      5) copy each part in order, closing each source on every path
      6) close destination exactly once; partial output is left in place
    """

    def __init__(self, resolver: UriPartResolver, fs: LocalFileSystem | None = None) -> None:
        self.resolver = resolver
        self.fs = fs or LocalFileSystem()

    def assemble(self, task: ConcatenationTask, output_root: Path) -> AssemblyResult:
        out = destination_path(output_root, task.destination)

        if task.skip_existing and self.fs.exists(out):
            logger.info("skipping %s", task)
            return AssemblyResult(destination=out, skipped=True)

        self.fs.make_parents(out)
        output = self.fs.open_write(out, task.append)
        try:
            parts, size = self._write_parts(task, output)
        except BaseException as e:
            close_after_failure(output, e)
            raise
        close_stream(output, str(out))

        logger.info("wrote %s (%d parts, %d bytes)", out, parts, size)
        return AssemblyResult(destination=out, skipped=False, parts_written=parts, bytes_written=size)

    def _write_parts(self, task: ConcatenationTask, output) -> tuple[int, int]:
        if not task.parts:
            logger.info("parts are empty, skipping")
            return 0, 0

        total = 0
        for uri in task.parts:
            source = self.resolver.resolve(uri)
            try:
                n = copy_stream(source, output)
            except BaseException as e:
                close_after_failure(source, e)
                raise
            close_stream(source, uri)
            logger.debug("copied %d bytes from %s", n, uri)
            total += n
        return len(task.parts), total
