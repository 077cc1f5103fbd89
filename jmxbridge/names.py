"""Object names addressing management objects.

An object name is a domain plus an unordered set of ``key=value``
properties, written ``domain:key1=value1,key2=value2``. Domains and values
may carry ``*``/``?`` wildcards, and a trailing ``*`` in the property list
turns the name into a property-list pattern that also accepts additional
keys. Values may be quoted to carry the ``,``, ``:`` and ``=`` separators.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import MalformedNameError

_WILDCARDS = frozenset("*?")
_KEY_FORBIDDEN = frozenset(':",=*?\n')
_UNQUOTED_FORBIDDEN = frozenset(':",=\n')
_QUOTED_ESCAPES = frozenset('"\\*?n')


def _split_properties(text: str) -> List[str]:
    """Split a property list on commas that are not inside quotes."""
    items: List[str] = []
    current: List[str] = []
    in_quotes = False
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
        elif in_quotes and char == "\\":
            current.append(char)
            escaped = True
        elif char == '"':
            current.append(char)
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            items.append("".join(current))
            current = []
        else:
            current.append(char)
    if in_quotes or escaped:
        raise MalformedNameError(f"Unbalanced quotes in property list: {text!r}")
    items.append("".join(current))
    return items


def _check_key(key: str) -> None:
    if not key:
        raise MalformedNameError("Property keys must not be empty")
    bad = _KEY_FORBIDDEN.intersection(key)
    if bad:
        raise MalformedNameError(
            f"Invalid character(s) {''.join(sorted(bad))!r} in key {key!r}"
        )


def _check_value(key: str, value: str) -> None:
    if not value:
        raise MalformedNameError(f"Value of key {key!r} must not be empty")
    if value.startswith('"'):
        if len(value) < 2 or not value.endswith('"'):
            raise MalformedNameError(f"Unterminated quoted value for key {key!r}")
        inner = value[1:-1]
        index = 0
        while index < len(inner):
            char = inner[index]
            if char == "\\":
                if index + 1 >= len(inner) or inner[index + 1] not in _QUOTED_ESCAPES:
                    raise MalformedNameError(
                        f"Invalid escape sequence in quoted value for key {key!r}"
                    )
                index += 2
                continue
            if char in '"\n':
                raise MalformedNameError(
                    f"Invalid character {char!r} in quoted value for key {key!r}"
                )
            index += 1
        return
    bad = _UNQUOTED_FORBIDDEN.intersection(value)
    if bad:
        raise MalformedNameError(
            f"Invalid character(s) {''.join(sorted(bad))!r} in value of key {key!r}; "
            "quote the value to use them"
        )


def _has_wildcard(value: str) -> bool:
    if not value.startswith('"'):
        return bool(_WILDCARDS.intersection(value))
    escaped = False
    for char in value:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in _WILDCARDS:
            return True
    return False


@lru_cache(maxsize=256)
def _compile_wildcard(pattern: str) -> "re.Pattern[str]":
    parts: List[str] = []
    index = 0
    quoted = pattern.startswith('"')
    while index < len(pattern):
        char = pattern[index]
        if quoted and char == "\\" and index + 1 < len(pattern):
            parts.append(re.escape(pattern[index : index + 2]))
            index += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts), re.DOTALL)


def wildcard_match(pattern: str, value: str) -> bool:
    """Glob-style match supporting only ``*`` and ``?``."""
    if not _has_wildcard(pattern):
        return pattern == value
    return _compile_wildcard(pattern).fullmatch(value) is not None


class ObjectName:
    """Immutable identifier of a management object or a pattern of them."""

    __slots__ = ("_domain", "_properties", "_property_pattern", "_canonical")

    def __init__(
        self,
        domain: str,
        properties: Optional[Mapping[str, str]] = None,
        property_pattern: bool = False,
    ) -> None:
        if not domain:
            raise MalformedNameError("Domain must not be empty")
        if ":" in domain or "\n" in domain:
            raise MalformedNameError(f"Invalid domain {domain!r}")
        props = dict(properties or {})
        for key, value in props.items():
            _check_key(key)
            if not isinstance(value, str):
                raise MalformedNameError(f"Value of key {key!r} must be a string")
            _check_value(key, value)
        if not props and not property_pattern:
            raise MalformedNameError("Key property list must not be empty")

        self._domain = domain
        self._properties: Tuple[Tuple[str, str], ...] = tuple(sorted(props.items()))
        self._property_pattern = property_pattern
        key_list = ",".join(f"{k}={v}" for k, v in self._properties)
        if property_pattern:
            key_list = f"{key_list},*" if key_list else "*"
        self._canonical = f"{domain}:{key_list}"

    @classmethod
    def parse(cls, text: str) -> "ObjectName":
        """Parse ``domain:key=value,...``; the empty string matches everything."""
        if not isinstance(text, str):
            raise MalformedNameError(f"Object name must be a string, not {type(text).__name__}")
        if text == "":
            return cls("*", property_pattern=True)

        domain, sep, rest = text.partition(":")
        if not sep:
            raise MalformedNameError(f"Missing ':' in object name {text!r}")

        properties: Dict[str, str] = {}
        pattern = False
        for item in _split_properties(rest):
            if item == "*":
                if pattern:
                    raise MalformedNameError(f"Repeated '*' in object name {text!r}")
                pattern = True
                continue
            key, eq, value = item.partition("=")
            if not eq:
                raise MalformedNameError(f"Property {item!r} in {text!r} is not key=value")
            if key in properties:
                raise MalformedNameError(f"Duplicate key {key!r} in object name {text!r}")
            properties[key] = value
        return cls(domain, properties, pattern)

    @classmethod
    def of(cls, value: "ObjectName | str") -> "ObjectName":
        """Return ``value`` unchanged if already a name, otherwise parse it."""
        if isinstance(value, ObjectName):
            return value
        return cls.parse(value)

    # ------------------------------------------------------------------
    @property
    def domain(self) -> str:
        return self._domain

    @property
    def properties(self) -> Dict[str, str]:
        """Copy of the key properties."""
        return dict(self._properties)

    def get_key_property(self, key: str) -> Optional[str]:
        return dict(self._properties).get(key)

    @property
    def key_property_list(self) -> str:
        """Canonical property list without the domain."""
        return self._canonical.partition(":")[2]

    @property
    def canonical_name(self) -> str:
        """Domain plus the key properties sorted by key."""
        return self._canonical

    @property
    def is_domain_pattern(self) -> bool:
        return bool(_WILDCARDS.intersection(self._domain))

    @property
    def is_property_list_pattern(self) -> bool:
        return self._property_pattern

    @property
    def is_property_value_pattern(self) -> bool:
        return any(_has_wildcard(value) for _, value in self._properties)

    @property
    def is_pattern(self) -> bool:
        return (
            self.is_domain_pattern
            or self._property_pattern
            or self.is_property_value_pattern
        )

    def matches(self, pattern: "ObjectName | str") -> bool:
        """Return ``True`` if this concrete name is selected by ``pattern``.

        Pattern names never match anything.
        """
        pattern = ObjectName.of(pattern)
        if self.is_pattern:
            return False
        if not wildcard_match(pattern.domain, self._domain):
            return False
        own = dict(self._properties)
        for key, expected in pattern._properties:
            actual = own.get(key)
            if actual is None or not wildcard_match(expected, actual):
                return False
        if not pattern.is_property_list_pattern and len(own) != len(pattern._properties):
            return False
        return True

    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectName):
            return NotImplemented
        return self._canonical == other._canonical

    def __hash__(self) -> int:
        return hash(self._canonical)

    def __str__(self) -> str:
        return self._canonical

    def __repr__(self) -> str:
        return f"ObjectName({self._canonical!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.of,
            serialization=core_schema.to_string_ser_schema(),
        )


MATCH_ALL = ObjectName("*", property_pattern=True)


__all__ = ["ObjectName", "MATCH_ALL", "wildcard_match"]
