"""Strict JSON parser producing the jsonsrt value model.

The parser follows the RFC 8259 grammar exactly: no comments, no
trailing commas, no single quotes, no NaN/Infinity. Nesting is handled
with an explicit stack so that deeply nested input fails with a
TooDeepError at a fixed limit instead of depending on the interpreter's
recursion limit.
"""

import re
from typing import Dict, List, Optional, Tuple, Union

from jsonsrt.codes import ParseErrorCode
from jsonsrt.kernel.value import Array, Boolean, Null, Number, Object, String, Value

DEFAULT_MAX_DEPTH = 512

_WHITESPACE_RE = re.compile(r"[ \t\n\r]*")
_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_NUMBER_TOKEN_RE = re.compile(r"[-+0-9.eE]+")
_NUMBER_START = frozenset("-+.0123456789")
_WORD_RE = re.compile(r"[A-Za-z0-9_]+")
_STRING_CHUNK_RE = re.compile(r'[^"\\\x00-\x1f]+')
_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")

_ESCAPES: Dict[str, str] = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_LITERALS: Tuple[Tuple[str, Value], ...] = (
    ("true", Boolean(True)),
    ("false", Boolean(False)),
    ("null", Null()),
)


class ParseError(ValueError):
    """Raised when input is not a single well-formed JSON document.

    Attributes:
        code: ParseErrorCode naming the failure
        message: Human-readable description without location
        offset: 0-based character offset (byte offset for INVALID_ENCODING)
        line: 1-based line number
        column: 1-based column, counted in characters
    """

    def __init__(self, code: ParseErrorCode, message: str, offset: int, line: int, column: int):
        self.code = code
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line} column {column}")

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {
            "code": self.code.value,
            "message": self.message,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
        }


class TooDeepError(ParseError):
    """Raised when nesting exceeds the configured maximum depth."""

    def __init__(self, max_depth: int, offset: int, line: int, column: int):
        self.max_depth = max_depth
        super().__init__(
            ParseErrorCode.TOO_DEEP,
            f"maximum nesting depth of {max_depth} exceeded",
            offset,
            line,
            column,
        )


def _locate(text: str, offset: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair."""
    line = text.count("\n", 0, offset) + 1
    column = offset - text.rfind("\n", 0, offset)
    return line, column


def _decode(data: Union[bytes, bytearray, memoryview, str]) -> str:
    if isinstance(data, str):
        surrogate = _SURROGATE_RE.search(data)
        if surrogate:
            line, column = _locate(data, surrogate.start())
            raise ParseError(
                ParseErrorCode.INVALID_ENCODING,
                f"lone surrogate U+{ord(surrogate.group()):04X} in input",
                surrogate.start(),
                line,
                column,
            )
        return data
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            # Line and column come from the valid prefix; offset stays in bytes
            prefix = raw[:e.start].decode("utf-8")
            line, column = _locate(prefix, len(prefix))
            raise ParseError(
                ParseErrorCode.INVALID_ENCODING,
                f"invalid UTF-8 byte 0x{raw[e.start]:02x}",
                e.start,
                line,
                column,
            ) from None
    raise TypeError(f"Expected bytes or str, got {type(data).__name__}")


class _Frame:
    """A container whose members are still being read."""

    __slots__ = ("is_object", "items", "key")

    def __init__(self, is_object: bool):
        self.is_object = is_object
        self.items: list = []
        self.key: Optional[str] = None

    @property
    def closer(self) -> str:
        return "}" if self.is_object else "]"

    def add(self, value: Value) -> None:
        if self.is_object:
            self.items.append((self.key, value))
            self.key = None
        else:
            self.items.append(value)

    def build(self) -> Value:
        if self.is_object:
            return Object(tuple(self.items))
        return Array(tuple(self.items))


class _Parser:
    def __init__(self, text: str, max_depth: int):
        self.text = text
        self.max_depth = max_depth
        self.pos = 1 if text.startswith("\ufeff") else 0

    def _error(self, code: ParseErrorCode, message: str, offset: Optional[int] = None) -> ParseError:
        if offset is None:
            offset = self.pos
        line, column = _locate(self.text, offset)
        return ParseError(code, message, offset, line, column)

    def _peek(self) -> str:
        return self.text[self.pos:self.pos + 1]

    def _skip_whitespace(self) -> None:
        self.pos = _WHITESPACE_RE.match(self.text, self.pos).end()

    def _unexpected(self, expected: str) -> ParseError:
        ch = self._peek()
        if not ch:
            return self._error(ParseErrorCode.UNEXPECTED_EOF, f"unexpected end of input, expected {expected}")
        return self._error(ParseErrorCode.UNEXPECTED_CHARACTER, f"unexpected character {ch!r}, expected {expected}")

    def parse_document(self) -> Value:
        value = self._parse_value()
        self._skip_whitespace()
        if self.pos != len(self.text):
            raise self._error(
                ParseErrorCode.TRAILING_DATA,
                f"unexpected {self._peek()!r} after end of document",
            )
        return value

    def _parse_value(self) -> Value:
        stack: List[_Frame] = []
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch == "{" or ch == "[":
                if len(stack) >= self.max_depth:
                    line, column = _locate(self.text, self.pos)
                    raise TooDeepError(self.max_depth, self.pos, line, column)
                frame = _Frame(is_object=ch == "{")
                self.pos += 1
                self._skip_whitespace()
                if self._peek() == frame.closer:
                    self.pos += 1
                    value = frame.build()
                else:
                    if frame.is_object:
                        frame.key = self._parse_key()
                    stack.append(frame)
                    continue
            else:
                value = self._parse_scalar()

            # Attach the finished value, closing every container that ends here
            while stack:
                frame = stack[-1]
                frame.add(value)
                self._skip_whitespace()
                ch = self._peek()
                if ch == ",":
                    comma = self.pos
                    self.pos += 1
                    self._skip_whitespace()
                    if self._peek() == frame.closer:
                        raise self._error(
                            ParseErrorCode.TRAILING_COMMA,
                            f"trailing comma before {frame.closer!r}",
                            comma,
                        )
                    if frame.is_object:
                        frame.key = self._parse_key()
                    break
                if ch == frame.closer:
                    self.pos += 1
                    stack.pop()
                    value = frame.build()
                    continue
                if not ch:
                    raise self._unexpected(f"',' or {frame.closer!r}")
                raise self._error(
                    ParseErrorCode.EXPECTED_SEPARATOR,
                    f"expected ',' or {frame.closer!r}, found {ch!r}",
                )
            else:
                return value

    def _parse_key(self) -> str:
        self._skip_whitespace()
        ch = self._peek()
        if ch != '"':
            if not ch:
                raise self._unexpected("an object key")
            raise self._error(ParseErrorCode.EXPECTED_KEY, f"expected string key, found {ch!r}")
        key = self._parse_string()
        self._skip_whitespace()
        ch = self._peek()
        if ch != ":":
            if not ch:
                raise self._unexpected("':'")
            raise self._error(ParseErrorCode.EXPECTED_COLON, f"expected ':' after object key, found {ch!r}")
        self.pos += 1
        return key

    def _parse_scalar(self) -> Value:
        ch = self._peek()
        if ch == '"':
            return String(self._parse_string())
        if ch in _NUMBER_START:
            return self._parse_number()
        for literal, node in _LITERALS:
            if self.text.startswith(literal, self.pos):
                self.pos += len(literal)
                return node
        word = _WORD_RE.match(self.text, self.pos)
        if word:
            raise self._error(
                ParseErrorCode.UNEXPECTED_CHARACTER,
                f"invalid literal {word.group()!r}, expected a value",
            )
        raise self._unexpected("a value")

    def _parse_number(self) -> Number:
        start = self.pos
        token = _NUMBER_TOKEN_RE.match(self.text, start).group()
        if not _NUMBER_RE.fullmatch(token):
            raise self._error(ParseErrorCode.INVALID_NUMBER, f"invalid number {token!r}", start)
        self.pos = start + len(token)
        return Number(token)

    def _read_hex(self, pos: int, escape_start: int) -> int:
        match = _HEX4_RE.match(self.text, pos)
        if not match:
            raise self._error(
                ParseErrorCode.INVALID_ESCAPE,
                "invalid \\u escape, expected four hex digits",
                escape_start,
            )
        return int(match.group(), 16)

    def _parse_string(self) -> str:
        text = self.text
        start = self.pos
        pos = start + 1
        chunks: List[str] = []
        while True:
            chunk = _STRING_CHUNK_RE.match(text, pos)
            if chunk:
                chunks.append(chunk.group())
                pos = chunk.end()
            if pos >= len(text):
                raise self._error(ParseErrorCode.UNTERMINATED_STRING, "unterminated string", start)
            ch = text[pos]
            if ch == '"':
                self.pos = pos + 1
                return "".join(chunks)
            if ch != "\\":
                raise self._error(
                    ParseErrorCode.CONTROL_CHARACTER,
                    f"unescaped control character U+{ord(ch):04X} in string",
                    pos,
                )
            escape = text[pos + 1:pos + 2]
            if escape in _ESCAPES:
                chunks.append(_ESCAPES[escape])
                pos += 2
            elif escape == "u":
                char, pos = self._parse_unicode_escape(pos)
                chunks.append(char)
            elif not escape:
                raise self._error(ParseErrorCode.UNTERMINATED_STRING, "unterminated string", start)
            else:
                raise self._error(ParseErrorCode.INVALID_ESCAPE, f"invalid escape '\\{escape}'", pos)

    def _parse_unicode_escape(self, pos: int) -> Tuple[str, int]:
        """Decode the \\uXXXX escape at pos, joining a following low surrogate.

        Returns the decoded character and the position after the escape(s).
        """
        code = self._read_hex(pos + 2, pos)
        end = pos + 6
        if 0xDC00 <= code <= 0xDFFF:
            raise self._error(ParseErrorCode.INVALID_ESCAPE, f"lone low surrogate \\u{code:04x}", pos)
        if 0xD800 <= code <= 0xDBFF:
            if not self.text.startswith("\\u", end):
                raise self._error(ParseErrorCode.INVALID_ESCAPE, f"lone high surrogate \\u{code:04x}", pos)
            low = self._read_hex(end + 2, end)
            if not 0xDC00 <= low <= 0xDFFF:
                raise self._error(ParseErrorCode.INVALID_ESCAPE, f"lone high surrogate \\u{code:04x}", pos)
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
            end += 6
        return chr(code), end


def parse(data: Union[bytes, bytearray, memoryview, str], max_depth: int = DEFAULT_MAX_DEPTH) -> Value:
    """Parse one JSON document into a value tree.

    Args:
        data: UTF-8 bytes or an already decoded string. A leading BOM is skipped.
        max_depth: Maximum number of nested arrays/objects

    Returns:
        Root value of the document

    Raises:
        ParseError: On malformed input, with code and location
        TooDeepError: When nesting exceeds max_depth
    """
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ValueError(f"max_depth must be a positive integer, got {max_depth!r}")
    return _Parser(_decode(data), max_depth).parse_document()
