from __future__ import annotations

import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Mapping, Protocol

from .coordinates import ArtifactCoordinate

REPOSITORY_ENV = "PARTCAT_REPOSITORY"


class ArtifactNotFound(LookupError):
    pass


class ArtifactStore(Protocol):
    """Anything that can turn a coordinate into the artifact's bytes.

    Implementations raise ArtifactNotFound when nothing backs the coordinate.
    """

    def open(self, coordinate: ArtifactCoordinate) -> BinaryIO: ...


@dataclass(frozen=True)
class LocalRepository:
    root: Path  # e.g. ~/.m2/repository

    @staticmethod
    def default() -> "LocalRepository":
        v = os.environ.get(REPOSITORY_ENV)
        if v is not None and v.strip():
            return LocalRepository(root=Path(v.strip()).expanduser())
        return LocalRepository(root=Path.home() / ".m2" / "repository")

    def artifact_path(self, coordinate: ArtifactCoordinate) -> Path:
        # Maven 2 layout: <group as dirs>/<artifact>/<version>/<artifact>-<version>[-<classifier>].<type>
        name = f"{coordinate.artifact_id}-{coordinate.version}"
        if coordinate.classifier:
            name += f"-{coordinate.classifier}"
        name += f".{coordinate.type}"
        return (
            self.root.joinpath(*coordinate.group_id.split("."))
            / coordinate.artifact_id
            / coordinate.version
            / name
        )

    def open(self, coordinate: ArtifactCoordinate) -> BinaryIO:
        p = self.artifact_path(coordinate)
        if not p.is_file():
            raise ArtifactNotFound(f"Unable to resolve artifact file {coordinate} (looked in {p})")
        return p.open("rb")


class MemoryArtifactStore:
    """In-process store keyed by the canonical coordinate string (g:a:type[:classifier]:v)."""

    def __init__(self, artifacts: Mapping[str, bytes] | None = None) -> None:
        self.artifacts: Dict[str, bytes] = dict(artifacts or {})

    def add(self, coords: str | ArtifactCoordinate, content: bytes) -> None:
        if isinstance(coords, str):
            coords = ArtifactCoordinate.parse(coords)
        self.artifacts[str(coords)] = bytes(content)

    def open(self, coordinate: ArtifactCoordinate) -> BinaryIO:
        content = self.artifacts.get(str(coordinate))
        if content is None:
            raise ArtifactNotFound(f"Not found {coordinate}")
        return io.BytesIO(content)
