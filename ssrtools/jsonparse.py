"""Byte-level JSON parser producing a :class:`~ssrtools.jsonvalue.JsonValue` tree.

The grammar is deliberately lenient in the same ways as the parser it
mirrors: trailing commas in arrays and objects are accepted, a lone ``-``
reads as the integer 0, unknown escapes keep the escaped character, and
parsing stops quietly at a NUL byte once the root value is complete.
Integers wrap to signed 64 bits.
"""

from __future__ import annotations

import math

from .jsonvalue import JsonSettings, JsonType, JsonValue

__all__ = ["JsonParseError", "parse"]

_BOM = b"\xef\xbb\xbf"
_WHITESPACE = frozenset(b" \t\r\n")
_DIGITS = frozenset(b"0123456789")
_HEX = {ord(c): int(c, 16) for c in "0123456789abcdefABCDEF"}
_ESCAPES = {ord("b"): 0x08, ord("f"): 0x0C, ord("n"): 0x0A, ord("r"): 0x0D, ord("t"): 0x09}
_LITERALS = {
    ord("t"): (b"rue", JsonType.BOOLEAN, True),
    ord("f"): (b"alse", JsonType.BOOLEAN, False),
    ord("n"): (b"ull", JsonType.NULL, None),
}

_UINT_LIMIT = 0xFFFFFFFF - 8

# Sizes used for the memory estimate checked against ``max_memory``.
_VALUE_SIZE = 40
_POINTER_SIZE = 8
_ENTRY_SIZE = 24

_NEXT = 1 << 0
_REPROC = 1 << 1
_NEED_COMMA = 1 << 2
_SEEK_VALUE = 1 << 3
_ESCAPED = 1 << 4
_STRING = 1 << 5
_NEED_COLON = 1 << 6
_DONE = 1 << 7
_NUM_NEGATIVE = 1 << 8
_NUM_ZERO = 1 << 9
_NUM_E = 1 << 10
_NUM_E_GOT_SIGN = 1 << 11
_NUM_E_NEGATIVE = 1 << 12
_LINE_COMMENT = 1 << 13
_BLOCK_COMMENT = 1 << 14

_NUM_FLAGS = _NUM_NEGATIVE | _NUM_E | _NUM_E_GOT_SIGN | _NUM_E_NEGATIVE | _NUM_ZERO


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed.

    ``line`` and ``column`` give the position of the failure where one is
    known; the column counts from the last newline seen between tokens.
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


def _wrap64(number: int) -> int:
    number &= 0xFFFFFFFFFFFFFFFF
    return number - (1 << 64) if number >= 1 << 63 else number


def _pow10(exponent: int) -> float:
    try:
        return 10.0 ** exponent
    except OverflowError:
        return math.inf


def _show(byte: int) -> str:
    return chr(byte) if byte else ""


class _Text:
    """Collects the bytes and escaped code points of one JSON string."""

    __slots__ = ("parts", "raw", "size")

    def __init__(self) -> None:
        self.parts: list[str] = []
        self.raw = bytearray()
        self.size = 0

    def add_byte(self, byte: int) -> None:
        self.raw.append(byte)
        self.size += 1

    def add_char(self, code: int) -> None:
        if code <= 0x7F:
            self.add_byte(code)
            return
        self._flush()
        self.parts.append(chr(code))
        self.size += 2 if code <= 0x7FF else 3

    def _flush(self) -> None:
        if self.raw:
            self.parts.append(self.raw.decode("utf-8", "surrogateescape"))
            self.raw.clear()

    def finish(self) -> str:
        self._flush()
        return "".join(self.parts)


class _Parser:
    def __init__(self, data: bytes, settings: JsonSettings) -> None:
        self.data = data
        self.end = len(data)
        self.comments = settings.enable_comments
        self.max_memory = settings.max_memory
        self.used_memory = 0
        self.line = 1
        self.line_begin = 0
        self.created: list[JsonValue] = []
        self.text_bytes: dict[int, int] = {}

    def _fail(self, text: str, i: int) -> None:
        column = i - self.line_begin
        raise JsonParseError(f"{self.line}:{column}: {text}", self.line, column)

    def _fail_in_string(self, text: str, i: int) -> None:
        column = i - self.line_begin
        raise JsonParseError(f"{text} (at {self.line}:{column})", self.line, column)

    def _charge(self, size: int) -> None:
        if self.max_memory:
            self.used_memory += size
            if self.used_memory > self.max_memory:
                raise JsonParseError("Memory allocation failure")

    def _whitespace(self, byte: int, i: int) -> None:
        if byte == 0x0A:
            self.line += 1
            self.line_begin = i

    def _new(self, parent: JsonValue | None, kind: JsonType, value=None) -> JsonValue:
        self._charge(_VALUE_SIZE)
        node = JsonValue(kind, value, parent)
        self.created.append(node)
        return node

    def _unicode_escape(self, i: int) -> tuple[int, int]:
        if self.end - i < 4:
            self._fail_in_string("Invalid character value `u`", i)
        code = 0
        for _ in range(4):
            i += 1
            digit = _HEX.get(self.data[i]) if i < self.end else None
            if digit is None:
                self._fail_in_string("Invalid character value `u`", i)
            code = code * 16 + digit
        return i, code

    def _literal(self, i: int, rest: bytes) -> int:
        if self.end - i < len(rest):
            self._fail("Unknown value", i)
        for expected in rest:
            i += 1
            if (self.data[i] if i < self.end else 0) != expected:
                self._fail("Unknown value", i)
        return i

    def _charge_contents(self) -> None:
        for node in self.created:
            if node.type is JsonType.ARRAY:
                self._charge(len(node.value) * _POINTER_SIZE)
            elif node.type is JsonType.OBJECT:
                self._charge(len(node.value) * _ENTRY_SIZE + self.text_bytes.get(id(node), 0))
            elif node.type is JsonType.STRING:
                self._charge(self.text_bytes.get(id(node), 0) + 1)

    def run(self) -> JsonValue:
        data, end = self.data, self.end
        flags = _SEEK_VALUE
        top: JsonValue | None = None
        root: JsonValue | None = None
        text: _Text | None = None
        num_digits = num_e = num_fraction = 0

        i = -1
        while True:
            i += 1
            b = data[i] if i < end else 0

            if flags & _STRING:
                if not b:
                    self._fail_in_string("Unexpected EOF in string", i)
                if text.size > _UINT_LIMIT:
                    self._fail("Too long (caught overflow)", i)
                if flags & _ESCAPED:
                    flags &= ~_ESCAPED
                    if b == 0x75:
                        i, code = self._unicode_escape(i)
                        text.add_char(code)
                    else:
                        text.add_byte(_ESCAPES.get(b, b))
                    continue
                if b == 0x5C:
                    flags |= _ESCAPED
                    continue
                if b != 0x22:
                    text.add_byte(b)
                    continue
                flags &= ~_STRING
                content, size = text.finish(), text.size
                text = None
                if top.type is JsonType.STRING:
                    top.value = content
                    self.text_bytes[id(top)] = size
                    flags |= _NEXT
                else:
                    top.value.append((content, None))
                    self.text_bytes[id(top)] = self.text_bytes.get(id(top), 0) + size + 1
                    flags |= _SEEK_VALUE | _NEED_COLON
                    continue

            if self.comments:
                if flags & _LINE_COMMENT:
                    if b in (0x0D, 0x0A, 0):
                        flags &= ~_LINE_COMMENT
                        i -= 1
                    continue
                if flags & _BLOCK_COMMENT:
                    if not b:
                        self._fail("Unexpected EOF in block comment", i)
                    if b == 0x2A and i < end - 1 and data[i + 1] == 0x2F:
                        flags &= ~_BLOCK_COMMENT
                        i += 1
                    continue
                if b == 0x2F:
                    if not flags & (_SEEK_VALUE | _DONE) and top.type is not JsonType.OBJECT:
                        self._fail("Comment not allowed here", i)
                    i += 1
                    if i == end:
                        self._fail("EOF unexpected", i)
                    b = data[i]
                    if b == 0x2F:
                        flags |= _LINE_COMMENT
                        continue
                    if b == 0x2A:
                        flags |= _BLOCK_COMMENT
                        continue
                    self._fail(f"Unexpected `{_show(b)}` in comment opening sequence", i)

            if flags & _DONE:
                if not b:
                    break
                if b in _WHITESPACE:
                    self._whitespace(b, i)
                    continue
                self._fail(f"Trailing garbage: `{_show(b)}`", i)

            if flags & _SEEK_VALUE:
                if b in _WHITESPACE:
                    self._whitespace(b, i)
                    continue
                if b == 0x5D:
                    if top is None or top.type is not JsonType.ARRAY:
                        self._fail("Unexpected ]", i)
                    flags = (flags & ~(_NEED_COMMA | _SEEK_VALUE)) | _NEXT
                else:
                    if flags & _NEED_COMMA:
                        if b == 0x2C:
                            flags &= ~_NEED_COMMA
                            continue
                        self._fail(f"Expected , before {_show(b)}", i)
                    if flags & _NEED_COLON:
                        if b == 0x3A:
                            flags &= ~_NEED_COLON
                            continue
                        self._fail(f"Expected : before {_show(b)}", i)

                    flags &= ~_SEEK_VALUE
                    if b == 0x7B:
                        top = self._new(top, JsonType.OBJECT)
                        root = root or top
                        continue
                    if b == 0x5B:
                        top = self._new(top, JsonType.ARRAY)
                        root = root or top
                        flags |= _SEEK_VALUE
                        continue
                    if b == 0x22:
                        top = self._new(top, JsonType.STRING)
                        root = root or top
                        flags |= _STRING
                        text = _Text()
                        continue
                    if b in _LITERALS:
                        rest, kind, value = _LITERALS[b]
                        i = self._literal(i, rest)
                        top = self._new(top, kind, value)
                        root = root or top
                        flags |= _NEXT
                    elif b in _DIGITS or b == 0x2D:
                        top = self._new(top, JsonType.INTEGER, 0)
                        root = root or top
                        flags &= ~_NUM_FLAGS
                        num_digits = num_fraction = num_e = 0
                        if b != 0x2D:
                            flags |= _REPROC
                        else:
                            flags |= _NUM_NEGATIVE
                            continue
                    else:
                        self._fail(f"Unexpected {_show(b)} when seeking value", i)
            elif top.type is JsonType.OBJECT:
                if b in _WHITESPACE:
                    self._whitespace(b, i)
                    continue
                if b == 0x22:
                    if flags & _NEED_COMMA:
                        self._fail('Expected , before "', i)
                    flags |= _STRING
                    text = _Text()
                elif b == 0x7D:
                    flags = (flags & ~_NEED_COMMA) | _NEXT
                elif b == 0x2C and flags & _NEED_COMMA:
                    flags &= ~_NEED_COMMA
                else:
                    self._fail(f"Unexpected `{_show(b)}` in object", i)
            elif top.type in (JsonType.INTEGER, JsonType.DOUBLE):
                if b in _DIGITS:
                    num_digits += 1
                    digit = b - 0x30
                    if flags & _NUM_E:
                        flags |= _NUM_E_GOT_SIGN
                        num_e = _wrap64(num_e * 10 + digit)
                        continue
                    if top.type is JsonType.INTEGER:
                        if flags & _NUM_ZERO:
                            self._fail(f"Unexpected `0` before `{_show(b)}`", i)
                        if num_digits == 1 and b == 0x30:
                            flags |= _NUM_ZERO
                        top.value = _wrap64(top.value * 10 + digit)
                        continue
                    num_fraction = _wrap64(num_fraction * 10 + digit)
                    continue

                if b in (0x2B, 0x2D):
                    if flags & _NUM_E and not flags & _NUM_E_GOT_SIGN:
                        flags |= _NUM_E_GOT_SIGN
                        if b == 0x2D:
                            flags |= _NUM_E_NEGATIVE
                        continue
                elif b == 0x2E and top.type is JsonType.INTEGER:
                    if not num_digits:
                        self._fail("Expected digit before `.`", i)
                    top.type = JsonType.DOUBLE
                    top.value = float(top.value)
                    num_digits = 0
                    continue

                if not flags & _NUM_E:
                    if top.type is JsonType.DOUBLE:
                        if not num_digits:
                            self._fail("Expected digit after `.`", i)
                        top.value += num_fraction / _pow10(num_digits)
                    if b in (0x65, 0x45):
                        flags |= _NUM_E
                        if top.type is JsonType.INTEGER:
                            top.type = JsonType.DOUBLE
                            top.value = float(top.value)
                        num_digits = 0
                        flags &= ~_NUM_ZERO
                        continue
                else:
                    if not num_digits:
                        self._fail("Expected digit after `e`", i)
                    top.value *= _pow10(-num_e if flags & _NUM_E_NEGATIVE else num_e)

                if flags & _NUM_NEGATIVE:
                    if top.type is JsonType.INTEGER:
                        top.value = _wrap64(-top.value)
                    else:
                        top.value = -top.value
                flags |= _NEXT | _REPROC

            if flags & _REPROC:
                flags &= ~_REPROC
                i -= 1

            if flags & _NEXT:
                flags = (flags & ~_NEXT) | _NEED_COMMA
                parent = top.parent
                if parent is None:
                    flags |= _DONE
                    continue
                if parent.type is JsonType.ARRAY:
                    flags |= _SEEK_VALUE
                    parent.value.append(top)
                else:
                    name, _ = parent.value[-1]
                    parent.value[-1] = (name, top)
                if len(parent.value) > _UINT_LIMIT:
                    self._fail("Too long (caught overflow)", i)
                top = parent

        self._charge_contents()
        return root


def parse(data: bytes | bytearray | memoryview | str, settings: JsonSettings | None = None) -> JsonValue:
    """Parse a JSON document and return its root value.

    ``data`` may be bytes (UTF-8, optionally with a byte-order mark) or str.
    Raises :class:`JsonParseError` on malformed input or when the estimated
    memory use exceeds ``settings.max_memory``.
    """
    if settings is None:
        settings = JsonSettings()
    if isinstance(data, str):
        raw = data.encode("utf-8", "surrogateescape")
    else:
        raw = bytes(data)
    if raw.startswith(_BOM):
        raw = raw[len(_BOM):]
    return _Parser(raw, settings).run()