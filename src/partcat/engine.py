from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .assembler import AssemblyResult, FileAssembler
from .errors import ConcatenationError, FailureCategory
from .task import ConcatenationTask

logger = logging.getLogger(__name__)

# ---- Exit codes ----
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_EXECUTION_ERROR = 2


@dataclass(frozen=True)
class RunResult:
    ok: bool
    errors: List[str]
    category: FailureCategory | None = None
    failed_task: ConcatenationTask | None = None
    assembled: List[AssemblyResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.ok:
            return EXIT_OK
        if self.category is FailureCategory.EXECUTION_ERROR:
            return EXIT_EXECUTION_ERROR
        return EXIT_FAILURE


def _describe(e: BaseException) -> List[str]:
    lines = [str(e)]
    cause = e.__cause__
    while cause is not None:
        lines.append(f"  caused by: {cause}")
        cause = cause.__cause__
    for note in getattr(e, "__notes__", []):
        lines.append(f"  {note}")
    return lines


class ConcatenationEngine:
    def __init__(self, assembler: FileAssembler) -> None:
        self.assembler = assembler

    def run(self, tasks: Sequence[ConcatenationTask] | None, output_root: str | Path | None) -> RunResult:
        """Process tasks in order; the first failure ends the run.

        `tasks is None` means nothing was configured and succeeds without
        looking at `output_root`.
        """

        if tasks is None:
            logger.info("No files are set, skipping")
            return RunResult(True, [])
        if output_root is None or output_root == "" or output_root == Path(""):
            return RunResult(False, ["Output directory must be set"], category=FailureCategory.FAILURE)

        root = Path(output_root)
        logger.info("output directory: %s (%d files)", root, len(tasks))

        assembled: List[AssemblyResult] = []
        for i, task in enumerate(tasks):
            logger.info("file %s", task)
            try:
                assembled.append(self.assembler.assemble(task, root))
            except ConcatenationError as e:
                category = e.category
                errors = _describe(e)
            except OSError as e:
                # Anything the filesystem layer did not classify is environmental.
                category = FailureCategory.EXECUTION_ERROR
                errors = [f"Unable to create file: {e}"]
            else:
                continue

            logger.error("file %d (%s) failed: %s", i, task.destination, errors[0])
            return RunResult(
                ok=False,
                errors=[f"file[{i}] {task.destination!r}: {errors[0]}", *errors[1:]],
                category=category,
                failed_task=task,
                assembled=assembled,
            )

        return RunResult(True, [], assembled=assembled)
