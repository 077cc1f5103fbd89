"""Tests for attribute paths."""

import pytest

from jmxbridge.errors import ProtocolDecodeError
from jmxbridge.path import AttributePath


def test_parse_splits_on_separator() -> None:
    path = AttributePath.parse("heap/used")
    assert path.segments == ("heap", "used")
    assert str(path) == "heap/used"


def test_escaped_separator_and_escape() -> None:
    path = AttributePath(["a/b", "c!d"])
    assert str(path) == "a!/b/c!!d"
    assert AttributePath.parse(str(path)) == path


def test_empty_path_is_identity() -> None:
    path = AttributePath.parse("")
    assert path.is_empty()
    assert len(path) == 0
    assert str(path) == ""


def test_dangling_escape_is_rejected() -> None:
    with pytest.raises(ProtocolDecodeError):
        AttributePath.parse("abc!")


def test_of_accepts_sequences() -> None:
    assert AttributePath.of(["x", "0"]) == AttributePath.parse("x/0")
    with pytest.raises(ProtocolDecodeError):
        AttributePath.of(3)
