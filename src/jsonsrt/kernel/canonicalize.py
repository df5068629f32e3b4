"""Canonical ordering of a parsed value tree.

Rules:
- Object members sorted by key, stable, so duplicate keys keep input order
- Key comparison is ordinal (code point or UTF-16 code unit), never locale-aware
- Arrays keep their order unless SortConfig.sort_arrays_by names a member key
- Scalars pass through untouched (number text included)

The tree is rebuilt bottom-up with an explicit work stack; no recursion.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from jsonsrt.kernel.value import (
    SCALAR_TYPES,
    Array,
    Boolean,
    Null,
    Number,
    Object,
    String,
    Value,
    take_last,
    type_rank,
)


class KeyOrder(str, Enum):
    """Ordinal key comparison rules."""

    CODEPOINT = "codepoint"  # Unicode scalar value order, same as UTF-8 byte order
    UTF16 = "utf16"  # UTF-16 code unit order, as RFC 8785 requires


_KEY_FUNCTIONS: Dict[KeyOrder, Callable[[str], Any]] = {
    KeyOrder.CODEPOINT: lambda key: key,
    KeyOrder.UTF16: lambda key: key.encode("utf-16-be"),
}


class SortConfig(BaseModel):
    """Ordering options for canonicalize()."""
    sort_keys: bool = True
    key_order: KeyOrder = KeyOrder.CODEPOINT
    sort_arrays_by: Optional[str] = None  # member key used to reorder arrays of objects

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def rfc8785(cls) -> "SortConfig":
        """Key ordering of the JSON Canonicalization Scheme."""
        return cls(key_order=KeyOrder.UTF16)


def _number_sort_key(value: Number) -> Tuple[Any, ...]:
    """Numeric order from the exact digits; exponents of any size compare."""
    negative, digits, point = value.parts
    if not digits:
        return (1,)
    if not negative:
        return (2, point, digits)
    # Larger magnitude sorts first; the trailing 10 puts -0.12 after -0.123
    return (0, -point, tuple(9 - int(digit) for digit in digits) + (10,))


def _typed_sort_key(value: Value) -> Any:
    """Comparable key for values of the same type_rank."""
    if isinstance(value, Null):
        return 0
    elif isinstance(value, Boolean):
        return value.value
    elif isinstance(value, Number):
        return _number_sort_key(value)
    elif isinstance(value, String):
        return value.value
    elif isinstance(value, (Object, Array)):
        # Imported here: the serializer is only needed for container comparisons
        from jsonsrt.kernel.serializer import COMPACT, serialize_to_str
        return serialize_to_str(value, COMPACT)
    else:
        raise TypeError(f"Not a JSON value node: {type(value).__name__}")


def _array_element_key(element: Value, member: str) -> Tuple[Any, ...]:
    """Sort key for one array element when sorting by a member value.

    Objects carrying the member come first, ordered by (type_rank, value);
    everything else follows in its original relative order.
    """
    if isinstance(element, Object):
        value = element.get(member)
        if value is not None:
            return (0, type_rank(value), _typed_sort_key(value))
    return (1,)


def canonicalize(tree: Value, config: Optional[SortConfig] = None) -> Value:
    """Return a canonically ordered copy of tree.

    Args:
        tree: Root of a value tree
        config: Ordering options (defaults to SortConfig())

    Returns:
        New tree; the input is not modified
    """
    if config is None:
        config = SortConfig()
    key_function = _KEY_FUNCTIONS[config.key_order]
    member = config.sort_arrays_by

    results: List[Value] = []
    stack: List[Tuple[Value, bool]] = [(tree, False)]
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, Object):
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for _, child in reversed(node.members))
                continue
            members = tuple(zip(node.keys(), take_last(results, len(node.members))))
            if config.sort_keys:
                members = tuple(sorted(members, key=lambda pair: key_function(pair[0])))
            results.append(Object(members))
        elif isinstance(node, Array):
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.items))
                continue
            items = take_last(results, len(node.items))
            if member is not None:
                items = tuple(sorted(items, key=lambda item: _array_element_key(item, member)))
            results.append(Array(items))
        elif isinstance(node, SCALAR_TYPES):
            results.append(node)
        else:
            raise TypeError(f"Not a JSON value node: {type(node).__name__}")
    return results[0]


def is_canonical(tree: Value, config: Optional[SortConfig] = None) -> bool:
    """True if canonicalize(tree, config) would return an equal tree."""
    return canonicalize(tree, config) == tree
