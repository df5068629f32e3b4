"""Public API for the jsonsrt package.

High-level functions that run the whole pipeline
(parse -> canonicalize -> serialize) and return complete results.
Callers should use these functions, or the kernel modules directly,
rather than reimplementing the pipeline.
"""

import os
import stat
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel

from jsonsrt.kernel.canonicalize import SortConfig, canonicalize
from jsonsrt.kernel.hash_utils import hash_bytes
from jsonsrt.kernel.parser import DEFAULT_MAX_DEPTH, ParseError, parse
from jsonsrt.kernel.serializer import FormatConfig, serialize


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def _write_atomic(path: Path, data: bytes) -> None:
    """Replace path with data in one step, keeping its permission bits.

    The bytes go to a temporary file in the same directory, which is then
    renamed over path. On failure the original file is left as it was.
    """
    mode = stat.S_IMODE(path.stat().st_mode)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise


class ParseErrorInfo(BaseModel):
    """Location and description of a parse failure."""
    code: str  # ParseErrorCode value, e.g. "UNEXPECTED_CHARACTER", "TOO_DEEP"
    message: str
    offset: int
    line: int
    column: int

    @classmethod
    def from_error(cls, error: ParseError) -> "ParseErrorInfo":
        return cls(**error.to_dict())


class FileResult(BaseModel):
    """Result of canonicalizing one file."""
    path: str
    ok: bool  # False if the file failed to parse
    changed: bool = False  # True if the canonical output differs from the file bytes
    written: bool = False  # True if the file was rewritten in place
    output: Optional[bytes] = None  # Canonical bytes (None on parse failure)
    digest: Optional[str] = None  # "sha256:..." of output
    error: Optional[ParseErrorInfo] = None


def canonicalize_text(
    data: Union[bytes, str],
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bytes:
    """Parse, canonicalize and serialize one JSON document.

    Args:
        data: JSON text (UTF-8 bytes or str)
        sort_config: Ordering options (defaults to SortConfig())
        format_config: Layout options (defaults to FormatConfig())
        max_depth: Maximum nesting depth accepted by the parser

    Returns:
        Canonical JSON as UTF-8 bytes

    Raises:
        ParseError: If data is not a well-formed JSON document
    """
    tree = parse(data, max_depth=max_depth)
    return serialize(canonicalize(tree, sort_config), format_config)


def is_canonical(
    data: Union[bytes, str],
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """True if data is byte-identical to its own canonical form."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    return canonicalize_text(raw, sort_config, format_config, max_depth) == raw


def canonicalize_file(
    path: Union[str, os.PathLike, Path],
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    write: bool = False,
) -> FileResult:
    """Canonicalize one file, optionally rewriting it in place.

    Parse errors are captured in the result so a batch can continue;
    I/O errors propagate. A file is only rewritten after its whole
    canonical output has been produced, and only if it changed.
    """
    file_path = _normalize_path(path)
    raw = file_path.read_bytes()
    try:
        output = canonicalize_text(raw, sort_config, format_config, max_depth)
    except ParseError as e:
        return FileResult(path=str(file_path), ok=False, error=ParseErrorInfo.from_error(e))

    changed = output != raw
    if write and changed:
        _write_atomic(file_path, output)
    return FileResult(
        path=str(file_path),
        ok=True,
        changed=changed,
        written=write and changed,
        output=output,
        digest=hash_bytes(output),
    )


def canonicalize_files(
    paths: Iterable[Union[str, os.PathLike, Path]],
    sort_config: Optional[SortConfig] = None,
    format_config: Optional[FormatConfig] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    write: bool = False,
    workers: int = 1,
) -> List[FileResult]:
    """Canonicalize several independent files.

    Each file runs its own pipeline with no shared state, so with
    workers > 1 they are processed on a thread pool. Results are
    returned in input order.
    """
    path_list = list(paths)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    def run(path: Union[str, os.PathLike, Path]) -> FileResult:
        return canonicalize_file(path, sort_config, format_config, max_depth, write)

    if workers == 1 or len(path_list) < 2:
        return [run(path) for path in path_list]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(run, path_list))
