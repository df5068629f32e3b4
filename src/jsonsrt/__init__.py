"""jsonsrt: deterministic JSON sorting and canonical formatting."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("jsonsrt")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from jsonsrt.api import canonicalize_text, canonicalize_file, canonicalize_files, FileResult, ParseErrorInfo
from jsonsrt.codes import ParseErrorCode
from jsonsrt.kernel.canonicalize import canonicalize, KeyOrder, SortConfig
from jsonsrt.kernel.parser import parse, ParseError, TooDeepError, DEFAULT_MAX_DEPTH
from jsonsrt.kernel.serializer import serialize, serialize_to_str, FormatConfig, NumberRendering, Spacing
from jsonsrt.kernel.hash_utils import hash_canonical, hash_text
from jsonsrt.kernel.value import Array, Boolean, Null, Number, Object, String, Value

__all__ = [
    "__version__",
    "parse",
    "canonicalize",
    "serialize",
    "serialize_to_str",
    "canonicalize_text",
    "canonicalize_file",
    "canonicalize_files",
    "hash_canonical",
    "hash_text",
    "FileResult",
    "ParseErrorInfo",
    "ParseError",
    "TooDeepError",
    "ParseErrorCode",
    "DEFAULT_MAX_DEPTH",
    "SortConfig",
    "KeyOrder",
    "FormatConfig",
    "Spacing",
    "NumberRendering",
    "Value",
    "Null",
    "Boolean",
    "Number",
    "String",
    "Array",
    "Object",
]
