"""Attribute paths selecting a nested part of a composite attribute value."""

from __future__ import annotations

from typing import Any, Iterable, List, Tuple

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import ProtocolDecodeError

SEPARATOR = "/"
ESCAPE = "!"


def _escape(segment: str) -> str:
    return segment.replace(ESCAPE, ESCAPE * 2).replace(SEPARATOR, ESCAPE + SEPARATOR)


class AttributePath:
    """Ordered, immutable sequence of path segments.

    Segments are opaque strings here; whether a segment is a map key or a
    list index is decided by whoever walks the value. In the string form
    segments are joined with ``/``; ``!/`` stands for a literal slash and
    ``!!`` for a literal exclamation mark.
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: Iterable[str] = ()) -> None:
        segments = tuple(segments)
        for segment in segments:
            if not isinstance(segment, str):
                raise ProtocolDecodeError("Path segments must be strings", segment)
        self._segments: Tuple[str, ...] = segments

    @classmethod
    def parse(cls, text: str) -> "AttributePath":
        if not isinstance(text, str):
            raise ProtocolDecodeError("Attribute path must be a string", text)
        if text == "":
            return cls()
        segments: List[str] = []
        current: List[str] = []
        index = 0
        while index < len(text):
            char = text[index]
            if char == ESCAPE:
                if index + 1 >= len(text):
                    raise ProtocolDecodeError("Dangling escape at end of path", text)
                current.append(text[index + 1])
                index += 2
                continue
            if char == SEPARATOR:
                segments.append("".join(current))
                current = []
            else:
                current.append(char)
            index += 1
        segments.append("".join(current))
        return cls(segments)

    @classmethod
    def of(cls, value: Any) -> "AttributePath":
        if isinstance(value, AttributePath):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, (list, tuple)):
            return cls(value)
        raise ProtocolDecodeError("Cannot build an attribute path", value)

    @property
    def segments(self) -> Tuple[str, ...]:
        return self._segments

    def is_empty(self) -> bool:
        return not self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributePath):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return SEPARATOR.join(_escape(segment) for segment in self._segments)

    def __repr__(self) -> str:
        return f"AttributePath({list(self._segments)!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.of,
            serialization=core_schema.to_string_ser_schema(),
        )


__all__ = ["AttributePath"]
