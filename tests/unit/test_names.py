"""Tests for object name parsing and matching."""

import pytest

from jmxbridge.errors import MalformedNameError
from jmxbridge.names import MATCH_ALL, ObjectName


def test_parse_and_canonical_name() -> None:
    name = ObjectName.parse("app:type=Foo,id=1")
    assert name.domain == "app"
    assert name.properties == {"type": "Foo", "id": "1"}
    assert name.canonical_name == "app:id=1,type=Foo"
    assert str(name) == "app:id=1,type=Foo"
    assert not name.is_pattern


def test_equality_ignores_property_order() -> None:
    a = ObjectName.parse("app:type=Foo,id=1")
    b = ObjectName.parse("app:id=1,type=Foo")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_canonical_string_round_trips() -> None:
    name = ObjectName.parse('app:name="a,b:c=d",type=Foo,*')
    assert ObjectName.parse(name.canonical_name) == name
    assert name.is_property_list_pattern


def test_quoted_values_may_hold_separators() -> None:
    name = ObjectName.parse('app:name="x=1,y:2",type=Foo')
    assert name.get_key_property("name") == '"x=1,y:2"'
    assert name.get_key_property("type") == "Foo"


@pytest.mark.parametrize(
    "text",
    [
        "no-colon",
        ":type=Foo",
        "app:",
        'app:name="unterminated,type=Foo',
        "app:type",
        "app:type=Foo,type=Bar",
        "app:=Foo",
        "app:type=a:b",
        'app:name="bad\\escape"',
        "app:*,*",
    ],
)
def test_malformed_names(text: str) -> None:
    with pytest.raises(MalformedNameError):
        ObjectName.parse(text)


def test_non_string_is_malformed() -> None:
    with pytest.raises(MalformedNameError):
        ObjectName.parse(42)  # type: ignore[arg-type]


def test_empty_string_matches_everything() -> None:
    pattern = ObjectName.parse("")
    assert pattern == MATCH_ALL
    assert pattern.canonical_name == "*:*"
    assert ObjectName.parse("app:type=Foo").matches(pattern)
    assert ObjectName.parse("x.y:a=b,c=d").matches(pattern)


def test_property_list_pattern_with_wildcard_domain() -> None:
    pattern = ObjectName.parse("*:type=Foo,*")
    assert ObjectName.parse("app:type=Foo,id=1").matches(pattern)
    assert ObjectName.parse("other:type=Foo,x=y").matches(pattern)
    assert not ObjectName.parse("app:type=Bar,id=1").matches(pattern)


def test_non_list_pattern_needs_identical_keys() -> None:
    pattern = ObjectName.parse("app:type=Foo")
    assert ObjectName.parse("app:type=Foo").matches(pattern)
    assert not ObjectName.parse("app:type=Foo,id=1").matches(pattern)


def test_value_and_domain_wildcards() -> None:
    assert ObjectName.parse("app:type=Foo1").matches("app:type=Foo?")
    assert ObjectName.parse("app.web:type=Servlet").matches("app.*:type=Serv*")
    assert not ObjectName.parse("app:type=Foo12").matches("app:type=Foo?")


def test_pattern_names_never_match() -> None:
    assert not ObjectName.parse("app:type=*").matches(MATCH_ALL)


def test_pattern_flags() -> None:
    assert ObjectName.parse("a*:type=Foo").is_domain_pattern
    assert ObjectName.parse("app:type=F*").is_property_value_pattern
    assert not ObjectName.parse('app:type="F\\*"').is_property_value_pattern


def test_key_property_list() -> None:
    assert ObjectName.parse("app:type=Foo,id=1").key_property_list == "id=1,type=Foo"
