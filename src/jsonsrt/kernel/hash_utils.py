"""Hash utilities over canonical JSON output.

Digests are computed over the serialized canonical bytes, so two
documents that differ only in member order, whitespace or number
spelling (when numbers are normalized) hash the same.

Default rules (RFC 8785 style):
- Object keys sorted by UTF-16 code units, recursively
- Arrays preserve order
- Numbers normalized, never rounded
- Compact single-line output, UTF-8, no trailing newline
"""

import hashlib
from pathlib import Path
from typing import Optional, Union

from jsonsrt.kernel.canonicalize import SortConfig, canonicalize
from jsonsrt.kernel.parser import DEFAULT_MAX_DEPTH, parse
from jsonsrt.kernel.serializer import FormatConfig, serialize
from jsonsrt.kernel.value import Value


def hash_bytes(content: bytes) -> str:
    """Compute SHA256 of already serialized canonical bytes.

    Returns:
        SHA256 hash as hex string (prefixed with "sha256:")
    """
    digest = hashlib.sha256(content).hexdigest()
    return f"sha256:{digest}"


def hash_canonical(
    tree: Value,
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
) -> str:
    """Compute SHA256 of the canonical serialization of tree.

    Args:
        tree: Root of a value tree
        sort_config: Ordering options (defaults to SortConfig.rfc8785())
        format_config: Layout options (defaults to FormatConfig.rfc8785())

    Returns:
        SHA256 hash as hex string (prefixed with "sha256:")
    """
    if sort_config is None:
        sort_config = SortConfig.rfc8785()
    if format_config is None:
        format_config = FormatConfig.rfc8785()
    return hash_bytes(serialize(canonicalize(tree, sort_config), format_config))


def hash_text(
    data: Union[bytes, str],
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Parse JSON text and hash its canonical form.

    Raises:
        ParseError: If data is not a well-formed JSON document
    """
    return hash_canonical(parse(data, max_depth=max_depth), sort_config, format_config)


def compute_canonical_json_sha256(path: Union[str, Path]) -> str:
    """Compute SHA256 of canonicalized JSON file contents (bare hex digest)."""
    p = Path(path)
    digest = hash_text(p.read_bytes())
    return digest[len("sha256:"):]
