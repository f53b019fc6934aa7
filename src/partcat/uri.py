from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote

from .errors import MalformedUri

DEFAULT_SCHEME = "file"

_SCHEME = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):(.*)", re.DOTALL)
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class PartUri:
    """A part reference split into scheme and decoded scheme-specific part.

    Rules:
      - no scheme prefix => the whole string is a path (`file` scheme)
      - the fragment (after the first '#') is dropped
      - percent escapes are decoded as UTF-8; lone surrogates are rejected
    """

    raw: str
    scheme: str | None
    scheme_specific_part: str

    @property
    def effective_scheme(self) -> str:
        return (self.scheme or DEFAULT_SCHEME).lower()

    @staticmethod
    def parse(raw: str) -> "PartUri":
        if not isinstance(raw, str):
            raise MalformedUri(f"uri must be a string, got {type(raw).__name__}")

        body = raw.split("#", 1)[0]
        m = _SCHEME.fullmatch(body)
        if m:
            scheme: str | None = m.group(1)
            ssp = m.group(2)
        else:
            scheme = None
            ssp = body

        if _BAD_ESCAPE.search(ssp):
            raise MalformedUri(f"Malformed percent escape in uri {raw!r}")

        decoded = unquote(ssp, encoding="utf-8")
        try:
            decoded.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedUri(f"uri {raw!r} is not valid UTF-8 text") from e

        return PartUri(raw=raw, scheme=scheme, scheme_specific_part=decoded)

    def __str__(self) -> str:
        return self.raw
