from __future__ import annotations

from enum import Enum, auto
from typing import List


class FailureCategory(Enum):
    # User-fixable: bad task, bad URI, missing resource.
    FAILURE = auto()
    # Environmental: the filesystem refused a read or write.
    EXECUTION_ERROR = auto()


class ConcatenationError(Exception):
    """Base for every error the engine reports as a run failure."""

    category = FailureCategory.FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.suppressed: List[BaseException] = []


class InvalidTask(ConcatenationError):
    pass


class MalformedUri(ConcatenationError):
    pass


class UnsupportedScheme(ConcatenationError):
    pass


class ResourceNotFound(ConcatenationError):
    pass


class MalformedArchive(ConcatenationError):
    pass


class IOFailure(ConcatenationError):
    category = FailureCategory.EXECUTION_ERROR


def attach_suppressed(primary: BaseException, secondary: BaseException) -> None:
    """Record a cleanup failure on the error that is already propagating."""
    primary.add_note(f"suppressed during cleanup: {secondary!r}")
    if isinstance(primary, ConcatenationError):
        primary.suppressed.append(secondary)
