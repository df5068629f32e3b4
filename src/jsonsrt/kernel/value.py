"""In-memory value model for a parsed JSON document.

A document is a tree of the six node types below. The set is closed:
every consumer dispatches on exactly these classes and raises on
anything else.

Key rules:
- Numbers keep their lexical text as parsed (``1.50`` stays ``1.50``)
- Object members are an ordered tuple of pairs, so duplicate keys survive
- Nodes are frozen; transforms build new trees instead of mutating
- Container equality and hashing walk the tree with an explicit stack
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from itertools import zip_longest
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

_NUMBER_PARTS_RE = re.compile(r"(-?)(0|[1-9][0-9]*)(?:\.([0-9]+))?(?:[eE]([+-]?)([0-9]+))?")

# int() and str() refuse very long digit strings, so convert piecewise
_DIGIT_CHUNK = 1000

_MISSING = object()


def digits_to_int(digits: str) -> int:
    """int() of a string of decimal digits, with no length limit."""
    value = 0
    for start in range(0, len(digits), _DIGIT_CHUNK):
        chunk = digits[start:start + _DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def int_to_digits(value: int) -> str:
    """str() of a non-negative int, with no length limit."""
    base = 10 ** _DIGIT_CHUNK
    chunks: List[str] = []
    while value >= base:
        value, low = divmod(value, base)
        chunks.append(str(low).zfill(_DIGIT_CHUNK))
    chunks.append(str(value))
    return "".join(reversed(chunks))


class NumberParts(NamedTuple):
    """Exact value of a number as ``(-1 if negative) * 0.<digits> * 10**point``.

    ``digits`` has no leading or trailing zeros; zero (``-0`` included)
    is ``NumberParts(False, "", 0)``.
    """
    negative: bool
    digits: str
    point: int


def number_parts(text: str) -> NumberParts:
    """Split JSON number text into sign, significant digits and point position.

    Raises:
        ValueError: If text is not a JSON number
    """
    match = _NUMBER_PARTS_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"Not JSON number text: {text!r}")
    sign, integer, fraction, exponent_sign, exponent = match.groups()
    digits = integer + (fraction or "")
    point = len(integer)
    if exponent:
        shift = digits_to_int(exponent)
        point += -shift if exponent_sign == "-" else shift
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    stripped = stripped.rstrip("0")
    if not stripped:
        return NumberParts(False, "", 0)
    return NumberParts(sign == "-", stripped, point)


def _tokens(tree: "Value") -> Iterator[Any]:
    """Flatten a tree into a token stream, depth first."""
    stack: List[Any] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Array):
            yield (Array, len(node.items))
            stack.extend(reversed(node.items))
        elif isinstance(node, Object):
            yield (Object, len(node.members))
            for key, child in reversed(node.members):
                stack.append(child)
                stack.append(key)
        else:
            # Scalar node or member key
            yield node


def tree_equal(left: "Value", right: "Value") -> bool:
    """Structural equality of two trees, without recursion."""
    for a, b in zip_longest(_tokens(left), _tokens(right), fillvalue=_MISSING):
        if a is _MISSING or b is _MISSING or a != b:
            return False
    return True


class _Container:
    """Equality and hashing for container nodes over the whole subtree."""

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return tree_equal(self, other)

    def __hash__(self) -> int:
        return hash(tuple(_tokens(self)))


@dataclass(frozen=True)
class Null:
    """JSON ``null``."""


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Number:
    """JSON number, stored as the exact text it was written with."""
    text: str

    @property
    def parts(self) -> NumberParts:
        """Exact value split into sign, digits and point position."""
        return number_parts(self.text)

    @property
    def decimal(self) -> Decimal:
        """Exact decimal value of the number text (never a float).

        Raises decimal.InvalidOperation when the exponent is beyond what
        the decimal module can represent; use ``parts`` for those.
        """
        return Decimal(self.text)

    @property
    def is_integer_text(self) -> bool:
        """True if the text has no fraction and no exponent part."""
        return not any(ch in self.text for ch in ".eE")


@dataclass(frozen=True)
class String:
    """JSON string holding decoded Unicode scalar values."""
    value: str


@dataclass(frozen=True, eq=False)
class Array(_Container):
    items: Tuple["Value", ...] = ()


@dataclass(frozen=True, eq=False)
class Object(_Container):
    """JSON object as ordered (key, value) pairs; keys may repeat."""
    members: Tuple[Tuple[str, "Value"], ...] = ()

    def keys(self) -> List[str]:
        return [key for key, _ in self.members]

    def get(self, key: str) -> Optional["Value"]:
        """Return the first value stored under key, or None."""
        for member_key, member_value in self.members:
            if member_key == key:
                return member_value
        return None


Value = Union[Null, Boolean, Number, String, Array, Object]

SCALAR_TYPES = (Null, Boolean, Number, String)


def type_rank(value: Value) -> int:
    """Stable cross-type rank: null < boolean < number < string < object < array."""
    if isinstance(value, Null):
        return 0
    elif isinstance(value, Boolean):
        return 1
    elif isinstance(value, Number):
        return 2
    elif isinstance(value, String):
        return 3
    elif isinstance(value, Object):
        return 4
    elif isinstance(value, Array):
        return 5
    else:
        raise TypeError(f"Not a JSON value node: {type(value).__name__}")


def take_last(results: List[Any], count: int) -> Tuple[Any, ...]:
    """Pop the last ``count`` entries of a work stack, keeping their order."""
    start = len(results) - count
    taken = tuple(results[start:])
    del results[start:]
    return taken


def _scalar_from_python(obj: Any) -> Value:
    if obj is None:
        return Null()
    elif isinstance(obj, bool):
        return Boolean(obj)
    elif isinstance(obj, int):
        return Number(str(obj))
    elif isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError(f"Non-finite number cannot be represented in JSON: {obj}")
        return Number(str(obj))
    elif isinstance(obj, float):
        if not math.isfinite(obj):
            raise ValueError(f"Non-finite number cannot be represented in JSON: {obj}")
        return Number(repr(obj))
    elif isinstance(obj, str):
        return String(obj)
    else:
        raise TypeError(
            f"Non-JSON type: {type(obj).__name__}. "
            f"Only None, bool, int, float, Decimal, str, dict, and list are allowed."
        )


def from_python(obj: Any) -> Value:
    """Build a value tree from plain Python data.

    Args:
        obj: dict/list/tuple/str/int/float/Decimal/bool/None, nested freely

    Returns:
        Equivalent value tree (dict insertion order becomes member order)

    Raises:
        TypeError: On non-JSON types or non-string dict keys
        ValueError: On NaN/Infinity or circular references
    """
    results: List[Value] = []
    active: set = set()
    stack: List[Tuple[Any, bool]] = [(obj, False)]
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, dict):
            if not expanded:
                if id(node) in active:
                    raise ValueError("Circular reference detected")
                for key in node:
                    if not isinstance(key, str):
                        raise TypeError(f"Dictionary keys must be strings, got {type(key).__name__}")
                active.add(id(node))
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(list(node.values())))
                continue
            active.discard(id(node))
            values = take_last(results, len(node))
            results.append(Object(tuple(zip(node.keys(), values))))
        elif isinstance(node, (list, tuple)):
            if not expanded:
                if id(node) in active:
                    raise ValueError("Circular reference detected")
                active.add(id(node))
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node))
                continue
            active.discard(id(node))
            results.append(Array(take_last(results, len(node))))
        else:
            results.append(_scalar_from_python(node))
    return results[0]


def _scalar_to_python(value: Value) -> Any:
    if isinstance(value, Null):
        return None
    elif isinstance(value, Boolean):
        return value.value
    elif isinstance(value, Number):
        if value.is_integer_text:
            magnitude = digits_to_int(value.text.lstrip("-"))
            return -magnitude if value.text.startswith("-") else magnitude
        return value.decimal
    elif isinstance(value, String):
        return value.value
    else:
        raise TypeError(f"Not a JSON value node: {type(value).__name__}")


def to_python(value: Value) -> Any:
    """Convert a value tree into plain Python data.

    Integral number text becomes ``int``, everything else ``Decimal``.
    Duplicate object keys collapse last-wins, as ``json.loads`` does.
    """
    results: List[Any] = []
    stack: List[Tuple[Value, bool]] = [(value, False)]
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, Object):
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for _, child in reversed(node.members))
                continue
            values = take_last(results, len(node.members))
            converted: Dict[str, Any] = {}
            for key, item in zip(node.keys(), values):
                converted[key] = item
            results.append(converted)
        elif isinstance(node, Array):
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.items))
                continue
            results.append(list(take_last(results, len(node.items))))
        else:
            results.append(_scalar_to_python(node))
    return results[0]
