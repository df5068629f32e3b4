"""Parse error code constants for jsonsrt.kernel.parser.

These constants prevent stringly-typed error codes and let callers
branch on the kind of failure without matching message text.
"""

from enum import Enum


class ParseErrorCode(str, Enum):
    """Parse error codes."""

    # Input level
    INVALID_ENCODING = "INVALID_ENCODING"
    UNEXPECTED_EOF = "UNEXPECTED_EOF"
    TRAILING_DATA = "TRAILING_DATA"
    TOO_DEEP = "TOO_DEEP"

    # Token level
    UNEXPECTED_CHARACTER = "UNEXPECTED_CHARACTER"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_ESCAPE = "INVALID_ESCAPE"
    CONTROL_CHARACTER = "CONTROL_CHARACTER"
    UNTERMINATED_STRING = "UNTERMINATED_STRING"

    # Structure level
    EXPECTED_KEY = "EXPECTED_KEY"
    EXPECTED_COLON = "EXPECTED_COLON"
    EXPECTED_SEPARATOR = "EXPECTED_SEPARATOR"
    TRAILING_COMMA = "TRAILING_COMMA"
