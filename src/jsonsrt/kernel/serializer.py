"""Render a value tree back to JSON text.

Output is fully determined by the tree and the FormatConfig: the same
pair always yields the same bytes. The default layout is a two-space
indent with ``": "`` between key and value, empty containers written as
``{}``/``[]`` and a trailing newline. FormatConfig.rfc8785() gives
RFC 8785 style single-line output.
"""

import json
from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from jsonsrt.kernel.value import (
    Array,
    Boolean,
    Null,
    Number,
    Object,
    String,
    Value,
    int_to_digits,
    number_parts,
)


class Spacing(str, Enum):
    """Whitespace after ``:`` (and after ``,`` on single-line output)."""

    COMPACT = "compact"
    SPACED = "spaced"


class NumberRendering(str, Enum):
    """How number nodes are written."""

    VERBATIM = "verbatim"  # lexical text as parsed
    NORMALIZED = "normalized"  # ECMAScript Number::toString layout, exact digits


class FormatConfig(BaseModel):
    """Layout options for serialize()."""
    indent: Union[Annotated[int, Field(ge=0)], Literal["tab"], None] = 2  # None = single line
    key_value_spacing: Spacing = Spacing.SPACED
    trailing_newline: bool = True
    number_rendering: NumberRendering = NumberRendering.VERBATIM
    ensure_ascii: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def indent_unit(self) -> Optional[str]:
        """Indentation for one nesting level, or None for single-line output."""
        if self.indent is None:
            return None
        if self.indent == "tab":
            return "\t"
        return " " * self.indent

    @classmethod
    def rfc8785(cls) -> "FormatConfig":
        """Single-line, compact, normalized numbers, no trailing newline."""
        return cls(
            indent=None,
            key_value_spacing=Spacing.COMPACT,
            trailing_newline=False,
            number_rendering=NumberRendering.NORMALIZED,
        )


# Single-line compact layout with verbatim numbers
COMPACT = FormatConfig(indent=None, key_value_spacing=Spacing.COMPACT, trailing_newline=False)


def normalize_number(text: str) -> str:
    """Render JSON number text in the ECMAScript Number::toString layout.

    All significant digits of the input are kept, so the result never
    rounds: ``1.50`` -> ``1.5``, ``1e10`` -> ``10000000000``,
    ``1e21`` -> ``1e+21``, ``0.0000001`` -> ``1e-7``, ``-0`` -> ``0``.

    Args:
        text: Lexical text of a JSON number

    Returns:
        Normalized number text
    """
    negative, digits, point = number_parts(text)
    if not digits:
        return "0"

    # value == 0.<digits> * 10**point
    count = len(digits)
    prefix = "-" if negative else ""
    if count <= point <= 21:
        return prefix + digits + "0" * (point - count)
    if 0 < point <= 21:
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * -point + digits
    power = point - 1
    mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
    return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{int_to_digits(abs(power))}"


def encode_string(value: str, ensure_ascii: bool = False) -> str:
    """Quote and escape a string.

    ``"`` and ``\\`` and U+0000..U+001F are always escaped (``\\b \\t \\n
    \\f \\r`` short forms, other controls as lowercase ``\\u00xx``).
    """
    return json.dumps(value, ensure_ascii=ensure_ascii)


def serialize_to_str(tree: Value, config: Optional[FormatConfig] = None) -> str:
    """Render tree as JSON text.

    Args:
        tree: Root of a value tree
        config: Layout options (defaults to FormatConfig())

    Returns:
        JSON text
    """
    if config is None:
        config = FormatConfig()
    unit = config.indent_unit
    compact = config.key_value_spacing == Spacing.COMPACT
    verbatim = config.number_rendering == NumberRendering.VERBATIM
    ensure_ascii = config.ensure_ascii
    key_separator = ":" if compact else ": "
    if unit is None:
        item_separator = "," if compact else ", "
    else:
        item_separator = ","

    parts: List[str] = []
    # Pending work: literal text, or a (node, level) pair still to render
    stack: List[Union[str, Tuple[Value, int]]] = [(tree, 0)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        node, level = item
        if isinstance(node, (Object, Array)):
            is_object = isinstance(node, Object)
            entries = node.members if is_object else node.items
            opener, closer = ("{", "}") if is_object else ("[", "]")
            if not entries:
                parts.append(opener + closer)
                continue
            if unit is None:
                inner = outer = ""
            else:
                inner = "\n" + unit * (level + 1)
                outer = "\n" + unit * level
            parts.append(opener)
            stack.append(outer + closer)
            for index in reversed(range(len(entries))):
                if is_object:
                    key, child = entries[index]
                    stack.append((child, level + 1))
                    stack.append(encode_string(key, ensure_ascii) + key_separator)
                else:
                    stack.append((entries[index], level + 1))
                stack.append(inner if index == 0 else item_separator + inner)
        elif isinstance(node, Null):
            parts.append("null")
        elif isinstance(node, Boolean):
            parts.append("true" if node.value else "false")
        elif isinstance(node, Number):
            parts.append(node.text if verbatim else normalize_number(node.text))
        elif isinstance(node, String):
            parts.append(encode_string(node.value, ensure_ascii))
        else:
            raise TypeError(f"Not a JSON value node: {type(node).__name__}")

    if config.trailing_newline:
        parts.append("\n")
    return "".join(parts)


def serialize(tree: Value, config: Optional[FormatConfig] = None) -> bytes:
    """Render tree as UTF-8 encoded JSON text."""
    return serialize_to_str(tree, config).encode("utf-8")
