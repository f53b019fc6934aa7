"""Scheme dispatch for part URIs.

Supported schemes:
  data:      inline content, optionally base64 (RFC 2397 form)
  file:      paths relative to the base directory; the scheme may be omitted
  <maven>:   an artifact, or one entry inside it, formatted as
             <groupId>:<artifactId>[:<type>[:<classifier>]]:<version>[!/<path>]

Handlers are looked up by lowercase scheme token, so a new scheme is one
`register` call away.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from pathlib import Path
from typing import BinaryIO, Dict, Protocol

from .archive import find_entry
from .coordinates import ArtifactReference
from .errors import IOFailure, MalformedUri, ResourceNotFound, UnsupportedScheme
from .fs import LocalFileSystem
from .store import ArtifactNotFound, ArtifactStore
from .uri import PartUri

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_SCHEME = "maven"

_NOT_BASE64 = re.compile(rb"[^A-Za-z0-9+/=]")


class SchemeHandler(Protocol):
    def open(self, uri: PartUri) -> BinaryIO: ...


def mime_b64decode(payload: bytes) -> bytes:
    """Lenient base64: ignores line breaks and other non-alphabet bytes, padding optional."""
    cleaned = _NOT_BASE64.sub(b"", payload).split(b"=", 1)[0]
    if len(cleaned) % 4 == 1:
        raise ValueError("last unit does not have enough valid bits")
    cleaned += b"=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned)


class DataScheme:
    def open(self, uri: PartUri) -> BinaryIO:
        ssp = uri.scheme_specific_part
        sep = ssp.find(",")
        if sep < 0:
            raise MalformedUri(f"Data uri should contain ',' separating actual data: {uri}")
        media_type = ssp[:sep].strip()
        data = ssp[sep + 1 :].encode("utf-8")
        if media_type.endswith(";base64"):
            try:
                data = mime_b64decode(data)
            except (ValueError, binascii.Error) as e:
                raise MalformedUri(f"Bad base64 payload in {uri}: {e}") from e
        return io.BytesIO(data)


class FileScheme:
    def __init__(self, base_dir: Path, fs: LocalFileSystem | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.fs = fs or LocalFileSystem()

    def open(self, uri: PartUri) -> BinaryIO:
        # Absolute paths replace base_dir on join.
        source = self.base_dir / uri.scheme_specific_part
        try:
            return self.fs.open_read(source)
        except ResourceNotFound as e:
            raise ResourceNotFound(f"Unable to read uri {uri}") from e


class ArtifactScheme:
    def __init__(self, store: ArtifactStore) -> None:
        self.store = store

    def open(self, uri: PartUri) -> BinaryIO:
        ref = ArtifactReference.parse(uri.scheme_specific_part)
        logger.info("resolving artifact %s", ref.coordinate)
        try:
            artifact = self.store.open(ref.coordinate)
        except ArtifactNotFound as e:
            raise ResourceNotFound(f"Unable to resolve artifact {uri}: {e}") from e
        except OSError as e:
            raise IOFailure(f"Unable to open artifact {ref.coordinate}: {e}") from e

        if ref.entry_path is None:
            return artifact
        try:
            return find_entry(artifact, ref.entry_path, container=str(ref.coordinate))
        except OSError as e:
            raise IOFailure(f"Unable to read artifact {ref.coordinate}: {e}") from e


class UriPartResolver:
    def __init__(self, handlers: Dict[str, SchemeHandler] | None = None) -> None:
        self._handlers: Dict[str, SchemeHandler] = {}
        for scheme, handler in (handlers or {}).items():
            self.register(scheme, handler)

    def register(self, scheme: str, handler: SchemeHandler) -> None:
        self._handlers[scheme.lower()] = handler

    def resolve(self, uri: str | PartUri) -> BinaryIO:
        part = uri if isinstance(uri, PartUri) else PartUri.parse(uri)
        scheme = part.effective_scheme
        handler = self._handlers.get(scheme)
        if handler is None:
            raise UnsupportedScheme(f"Unsupported uri scheme '{part.scheme}'")
        logger.info("resolving %s uri %s", scheme, part)
        return handler.open(part)


def build_resolver(
    base_dir: Path,
    store: ArtifactStore,
    artifact_scheme: str = DEFAULT_ARTIFACT_SCHEME,
    fs: LocalFileSystem | None = None,
) -> UriPartResolver:
    """Resolver wired with the data, file and artifact schemes."""
    resolver = UriPartResolver()
    resolver.register("data", DataScheme())
    resolver.register("file", FileScheme(base_dir, fs))
    resolver.register(artifact_scheme, ArtifactScheme(store))
    return resolver
