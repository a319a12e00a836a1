"""JSON value tree produced by the parser, with lenient accessors."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterator, Union


class JsonType(enum.IntEnum):
    """Kind of a parsed JSON value."""

    NONE = 0
    OBJECT = 1
    ARRAY = 2
    INTEGER = 3
    DOUBLE = 4
    STRING = 5
    BOOLEAN = 6
    NULL = 7


@dataclass(frozen=True)
class JsonSettings:
    """Parser options.

    ``max_memory`` limits the estimated memory a parse may use (0 means no
    limit); ``enable_comments`` allows ``//`` and ``/* */`` comments.
    """

    max_memory: int = 0
    enable_comments: bool = False

    def __post_init__(self) -> None:
        if self.max_memory < 0:
            raise ValueError("max_memory must not be negative")


ObjectEntries = list[tuple[str, "JsonValue"]]
Payload = Union[None, bool, int, float, str, list["JsonValue"], ObjectEntries]


@dataclass(eq=False)
class JsonValue:
    """A node of a parsed JSON document.

    Arrays hold a list of ``JsonValue``; objects hold an ordered list of
    ``(name, JsonValue)`` pairs, keeping duplicate names as they appeared.
    Lookups that miss return an empty value of type ``NONE`` instead of
    raising, so chains such as ``doc["a"][0]["b"]`` are always safe.
    """

    type: JsonType = JsonType.NONE
    value: Payload = None
    parent: JsonValue | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.value is None:
            if self.type is JsonType.ARRAY or self.type is JsonType.OBJECT:
                self.value = []
            elif self.type is JsonType.STRING:
                self.value = ""
            elif self.type is JsonType.INTEGER:
                self.value = 0
            elif self.type is JsonType.DOUBLE:
                self.value = 0.0
            elif self.type is JsonType.BOOLEAN:
                self.value = False

    def __getitem__(self, key: int | str) -> JsonValue:
        if isinstance(key, bool):
            return JsonValue()
        if isinstance(key, int):
            if self.type is not JsonType.ARRAY or key < 0 or key >= len(self.value):
                return JsonValue()
            return self.value[key]
        if isinstance(key, str):
            if self.type is not JsonType.OBJECT:
                return JsonValue()
            for name, item in self.value:
                if name == key:
                    return item
            return JsonValue()
        raise TypeError(f"JSON values are indexed by int or str, not {type(key).__name__}")

    def __iter__(self) -> Iterator[Any]:
        """Yield array elements, or object member names; nothing otherwise."""
        if self.type is JsonType.ARRAY:
            yield from self.value
        elif self.type is JsonType.OBJECT:
            for name, _ in self.value:
                yield name

    def __len__(self) -> int:
        if self.type in (JsonType.ARRAY, JsonType.OBJECT, JsonType.STRING):
            return len(self.value)
        return 0

    def __bool__(self) -> bool:
        return self.type is JsonType.BOOLEAN and bool(self.value)

    def __int__(self) -> int:
        if self.type is JsonType.INTEGER:
            return self.value
        if self.type is JsonType.DOUBLE:
            return int(self.value)
        return 0

    def __float__(self) -> float:
        if self.type is JsonType.INTEGER or self.type is JsonType.DOUBLE:
            return float(self.value)
        return 0.0

    def __str__(self) -> str:
        if self.type is JsonType.STRING:
            return self.value
        return ""

    def to_python(self) -> Any:
        """Convert to plain Python data; later duplicate object names win."""
        if self.type is JsonType.ARRAY:
            return [item.to_python() for item in self.value]
        if self.type is JsonType.OBJECT:
            return {name: item.to_python() for name, item in self.value}
        if self.type in (JsonType.NULL, JsonType.NONE):
            return None
        return self.value