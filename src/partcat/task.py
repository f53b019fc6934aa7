from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple


@dataclass(frozen=True)
class ConcatenationTask:
    # Output pathname relative to the output root.
    destination: str | None
    # Ordered part URIs; None and () both mean "no content".
    parts: Tuple[str, ...] | None = None
    skip_existing: bool = False
    append: bool = False

    @staticmethod
    def of(destination: str | None, *parts: str, skip_existing: bool = False, append: bool = False) -> "ConcatenationTask":
        return ConcatenationTask(destination, tuple(parts), skip_existing, append)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ConcatenationTask":
        parts: Sequence[str] | None = d.get("parts")
        return ConcatenationTask(
            destination=d.get("file"),
            parts=tuple(parts) if parts is not None else None,
            skip_existing=bool(d.get("skipExisting", False)),
            append=bool(d.get("append", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "file": self.destination,
            "skipExisting": self.skip_existing,
            "append": self.append,
        }
        if self.parts is not None:
            d["parts"] = list(self.parts)
        return d

    def __str__(self) -> str:
        parts = list(self.parts) if self.parts is not None else None
        return (
            f"task(file={self.destination!r}, parts={parts}, "
            f"skipExisting={self.skip_existing}, append={self.append})"
        )
