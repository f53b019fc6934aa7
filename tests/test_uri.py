from __future__ import annotations

import pytest

from partcat.coordinates import ArtifactCoordinate, ArtifactReference
from partcat.errors import MalformedUri
from partcat.uri import PartUri


def test_bare_path_defaults_to_file_scheme() -> None:
    u = PartUri.parse("no/prefix")
    assert u.scheme is None
    assert u.effective_scheme == "file"
    assert u.scheme_specific_part == "no/prefix"

    u = PartUri.parse("/absolutely/no/prefix")
    assert u.effective_scheme == "file"
    assert u.scheme_specific_part == "/absolutely/no/prefix"


def test_scheme_is_case_insensitive_and_ssp_is_decoded() -> None:
    u = PartUri.parse("DATA:,plain%20text#frag")
    assert u.scheme == "DATA"
    assert u.effective_scheme == "data"
    assert u.scheme_specific_part == ",plain text"
    assert str(u) == "DATA:,plain%20text#frag"


def test_bad_percent_escape_is_malformed() -> None:
    with pytest.raises(MalformedUri):
        PartUri.parse("data:,100%")
    with pytest.raises(MalformedUri):
        PartUri.parse("data:,%zz")


@pytest.mark.parametrize("raw", ["data:,\ud800", "file:a\udfffb", "\ud83d"])
def test_lone_surrogate_is_malformed(raw: str) -> None:
    with pytest.raises(MalformedUri):
        PartUri.parse(raw)


def test_invalid_utf8_escape_decodes_to_replacement_character() -> None:
    assert PartUri.parse("data:,%ED%A0%80").scheme_specific_part == ",�"


def test_coordinate_forms() -> None:
    c = ArtifactCoordinate.parse("g:a:v")
    assert (c.group_id, c.artifact_id, c.type, c.classifier, c.version) == ("g", "a", "jar", "", "v")
    assert str(c) == "g:a:jar:v"

    c = ArtifactCoordinate.parse("org.example:lib:zip:v1")
    assert c.type == "zip"
    assert str(c) == "org.example:lib:zip:v1"

    c = ArtifactCoordinate.parse("g:a:war:sources:1.0")
    assert c.classifier == "sources"
    assert str(c) == "g:a:war:sources:1.0"

    # An empty type falls back to jar.
    assert str(ArtifactCoordinate.parse("g:a::1.0")) == "g:a:jar:1.0"


def test_coordinate_rejects_wrong_field_counts() -> None:
    for bad in ["g:a", "t:o:o:m:a:n:y:c:o:l:o:n:s", "g:a:t:c:x:v", "g::v", "g:a t:v"]:
        with pytest.raises(MalformedUri):
            ArtifactCoordinate.parse(bad)


def test_reference_with_entry_path() -> None:
    r = ArtifactReference.parse("gr:ar:ve!/some/file")
    assert str(r.coordinate) == "gr:ar:jar:ve"
    assert r.entry_path == "some/file"

    r = ArtifactReference.parse("g:a:v")
    assert r.entry_path is None


def test_reference_with_space_is_malformed() -> None:
    with pytest.raises(MalformedUri):
        ArtifactReference.parse("g:a t:v")
    with pytest.raises(MalformedUri):
        ArtifactReference.parse("g:a:v!/")
