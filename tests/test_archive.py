from __future__ import annotations

import io
import zipfile

import pytest

from partcat.archive import find_entry
from partcat.errors import MalformedArchive, ResourceNotFound


def _zip(entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


class _Tracked(io.BytesIO):
    closes = 0

    def close(self) -> None:
        self.closes += 1
        super().close()


class _OnePass(io.RawIOBase):
    """Non-seekable stream, like a network download."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        chunk = self._buf.read(len(b))
        b[: len(chunk)] = chunk
        return len(chunk)


def test_finds_exact_entry() -> None:
    data = _zip({
        "some/wrong/file": b"Wrong!",
        "some/file": b"zipped content",
        "another/file": b"Not right!",
    })
    src = _Tracked(data)
    with find_entry(src, "some/file") as entry:
        assert entry.read() == b"zipped content"
    assert src.closes >= 1


def test_name_comparison_is_exact() -> None:
    data = _zip({"some/file": b"x"})
    with pytest.raises(ResourceNotFound):
        find_entry(io.BytesIO(data), "/some/file")
    with pytest.raises(ResourceNotFound):
        find_entry(io.BytesIO(data), "some/File")


def test_missing_entry_closes_source() -> None:
    src = _Tracked(_zip({"other/file": b""}))
    with pytest.raises(ResourceNotFound):
        find_entry(src, "file", container="g:a:jar:v")
    assert src.closed


def test_empty_archive_has_no_entries() -> None:
    with pytest.raises(ResourceNotFound):
        find_entry(io.BytesIO(_zip({})), "file")


def test_not_a_zip_is_malformed() -> None:
    src = _Tracked(b"definitely not a zip archive")
    with pytest.raises(MalformedArchive):
        find_entry(src, "file")
    assert src.closed


def test_corrupt_entry_data_is_malformed_not_truncated() -> None:
    payload = b"stored content " * 64
    data = bytearray(_zip({"file": payload}, compression=zipfile.ZIP_STORED))
    # Flip a byte inside the stored payload; the CRC check must catch it.
    i = data.index(b"stored content")
    data[i] ^= 0xFF

    with pytest.raises(MalformedArchive):
        with find_entry(io.BytesIO(bytes(data)), "file") as entry:
            entry.read()


def test_non_seekable_source_is_spooled() -> None:
    data = _zip({"a": b"first", "b": b"second"})
    with find_entry(_OnePass(data), "b") as entry:
        assert entry.read() == b"second"
