"""Performance sentinel documents and budgets.

Each sentinel builds a synthetic JSON document that stresses one part of
the pipeline. Budgets can be overridden from the environment so slow CI
machines do not need code changes.
"""

from __future__ import annotations

import os
from time import perf_counter
from typing import Callable, Dict, Tuple

from jsonsrt.api import canonicalize_text
from jsonsrt.kernel.parser import DEFAULT_MAX_DEPTH


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_WIDE_OBJECT_MS = _budget_from_env("JSONSRT_MAX_WIDE_OBJECT_MS", 1000.0)
MAX_LONG_ARRAY_MS = _budget_from_env("JSONSRT_MAX_LONG_ARRAY_MS", 1000.0)
MAX_DEEP_NESTING_MS = _budget_from_env("JSONSRT_MAX_DEEP_NESTING_MS", 500.0)
MAX_STRING_HEAVY_MS = _budget_from_env("JSONSRT_MAX_STRING_HEAVY_MS", 1000.0)


def wide_object(members: int = 20000) -> bytes:
    """One object with many members in reverse key order."""
    body = ",".join(f'"key{index:06d}":{index}' for index in reversed(range(members)))
    return ("{" + body + "}").encode("utf-8")


def long_array(items: int = 20000) -> bytes:
    """An array of small objects, each needing its members sorted."""
    body = ",".join(f'{{"z":{index},"a":"{index}","m":[1.50,2e3]}}' for index in range(items))
    return ("[" + body + "]").encode("utf-8")


def deep_nesting(depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """Alternating arrays and objects nested exactly depth levels."""
    opening = []
    closing = []
    for level in range(depth):
        if level % 2:
            opening.append('{"k":')
            closing.append("}")
        else:
            opening.append("[")
            closing.append("]")
    return ("".join(opening) + "0" + "".join(reversed(closing))).encode("utf-8")


def string_heavy(items: int = 5000) -> bytes:
    """Strings full of escapes and non-ASCII text."""
    value = '"line\\nbreak \\"quoted\\" caf\\u00e9 \\ud83d\\ude00 tab\\t"'
    return ("[" + ",".join([value] * items) + "]").encode("utf-8")


SENTINELS: Dict[str, Tuple[Callable[[], bytes], float]] = {
    "wide_object": (wide_object, MAX_WIDE_OBJECT_MS),
    "long_array": (long_array, MAX_LONG_ARRAY_MS),
    "deep_nesting": (deep_nesting, MAX_DEEP_NESTING_MS),
    "string_heavy": (string_heavy, MAX_STRING_HEAVY_MS),
}


def run_sentinel(name: str) -> Tuple[float, bytes]:
    """Run one sentinel through the full pipeline.

    Returns:
        (elapsed milliseconds, canonical output)
    """
    build, _ = SENTINELS[name]
    document = build()
    start = perf_counter()
    output = canonicalize_text(document)
    elapsed_ms = (perf_counter() - start) * 1000.0
    return elapsed_ms, output
