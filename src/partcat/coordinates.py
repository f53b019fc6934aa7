from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import MalformedUri

DEFAULT_TYPE = "jar"

# group:artifact[:type[:classifier]]:version ; type may be empty (=> jar).
_COORDINATE = re.compile(r"([^: ]+):([^: ]+)(?::([^: ]*)(?::([^: ]+))?)?:([^: ]+)")

# Artifact reference: coordinate, optionally followed by "!/" and an entry path.
ARTIFACT_REFERENCE = re.compile(r"([^ !]+)(?:!/(.+))?")


@dataclass(frozen=True)
class ArtifactCoordinate:
    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    classifier: str = ""

    @staticmethod
    def parse(coords: str) -> "ArtifactCoordinate":
        m = _COORDINATE.fullmatch(coords)
        if not m:
            raise MalformedUri(
                f"Bad artifact coordinates {coords!r}, expected format is "
                "<groupId>:<artifactId>[:<type>[:<classifier>]]:<version>"
            )
        group_id, artifact_id, type_, classifier, version = m.groups()
        return ArtifactCoordinate(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            type=type_ or DEFAULT_TYPE,
            classifier=classifier or "",
        )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


@dataclass(frozen=True)
class ArtifactReference:
    coordinate: ArtifactCoordinate
    entry_path: str | None = None

    @staticmethod
    def parse(ssp: str) -> "ArtifactReference":
        m = ARTIFACT_REFERENCE.fullmatch(ssp)
        if not m:
            raise MalformedUri(f"Malformed artifact reference {ssp!r}")
        return ArtifactReference(
            coordinate=ArtifactCoordinate.parse(m.group(1)),
            entry_path=m.group(2) or None,
        )
