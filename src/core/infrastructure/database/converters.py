"""JSON column converters for list and map fields.

Complex fields are stored as compact JSON text in a single TEXT column. Each
converter is a pure encode/decode pair; decoding never raises and treats empty,
blank, malformed or wrongly shaped text as "no data".
"""

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _loads(text: str | None) -> Any:
    """Parse JSON text, returning None for blank or malformed input."""
    if text is None or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        logger.debug(f"Discarding malformed JSON column value: {e}")
        return None


def encode_string_list(value: Sequence[str] | None) -> str:
    """Encode a list of strings; None encodes as an empty list."""
    return _dumps(list(value) if value is not None else [])


def decode_string_list(text: str | None) -> list[str]:
    """Decode a list of strings; anything unusable decodes as []."""
    data = _loads(text)
    if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
        return []
    return data


def encode_string_map(value: Mapping[str, Any] | None) -> str:
    """Encode a string-keyed mapping; None encodes as an empty object."""
    return _dumps(dict(value) if value is not None else {})


def decode_string_map(text: str | None) -> dict[str, Any]:
    """Decode a string-keyed mapping; anything unusable decodes as {}."""
    data = _loads(text)
    if not isinstance(data, dict):
        return {}
    return data


@dataclass(frozen=True)
class ColumnConverter[T]:
    """Encode/decode pair bound to a column type."""

    encode: Callable[[T | None], str]
    decode: Callable[[str | None], T]


STRING_LIST: ColumnConverter[list[str]] = ColumnConverter(
    encode=encode_string_list, decode=decode_string_list
)
STRING_MAP: ColumnConverter[dict[str, Any]] = ColumnConverter(
    encode=encode_string_map, decode=decode_string_map
)


class _JsonColumn(TypeDecorator):
    impl = Text
    cache_ok = True

    converter: ColumnConverter[Any]

    def process_bind_param(self, value: Any, dialect: Any) -> str:
        return self.converter.encode(value)

    def process_result_value(self, value: str | None, dialect: Any) -> Any:
        return self.converter.decode(value)


class JsonStringList(_JsonColumn):
    """TEXT column holding a JSON array of strings."""

    converter = STRING_LIST


class JsonStringMap(_JsonColumn):
    """TEXT column holding a JSON object with string keys."""

    converter = STRING_MAP
