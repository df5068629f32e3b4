"""jsonsrt CLI: sort and reformat JSON documents."""

import argparse
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Optional, Tuple, Union

from pydantic import ValidationError

from ._internal.logging import configure_logging, get_logger
from .api import canonicalize_files
from .kernel.canonicalize import KeyOrder, SortConfig, canonicalize
from .kernel.hash_utils import hash_canonical
from .kernel.parser import DEFAULT_MAX_DEPTH, ParseError, parse
from .kernel.serializer import FormatConfig, NumberRendering, Spacing, serialize

logger = get_logger(__name__)


def _parse_indent(value: str) -> Union[int, str, None]:
    """argparse type for --indent: a space count, 'tab' or 'none'."""
    lowered = value.lower()
    if lowered == "tab":
        return "tab"
    if lowered == "none":
        return None
    try:
        spaces = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, 'tab' or 'none', got {value!r}")
    if spaces < 0:
        raise argparse.ArgumentTypeError(f"indent must be >= 0, got {spaces}")
    return spaces


def _build_parser(jsonsrt_version: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonsrt",
        description="Sort JSON contents into a deterministic, canonical layout. "
                    "Reads stdin and writes stdout unless FILE arguments are given, "
                    "in which case each file is rewritten in place."
    )
    parser.add_argument("--version", action="version", version=f"jsonsrt {jsonsrt_version}")
    parser.add_argument(
        "files",
        metavar="FILE",
        type=Path,
        nargs="*",
        help="Files to process, otherwise uses stdin/stdout"
    )

    ordering = parser.add_argument_group("ordering")
    ordering.add_argument(
        "--no-sort-keys",
        action="store_true",
        help="Keep object members in input order"
    )
    ordering.add_argument(
        "--key-order",
        choices=[order.value for order in KeyOrder],
        default=None,
        help="Key comparison: codepoint (default) or utf16 (RFC 8785)"
    )
    ordering.add_argument(
        "--sort-by-value",
        metavar="KEY",
        default=None,
        help="Sort arrays by the value of member KEY, compared by type then value "
             "(numbers numerically). Elements that are not objects or lack KEY "
             "move to the end of the array, keeping their relative order"
    )

    layout = parser.add_argument_group("layout")
    layout.add_argument(
        "--indent",
        type=_parse_indent,
        default=argparse.SUPPRESS,
        help="Spaces per level, 'tab', or 'none' for single-line output (default: 2)"
    )
    layout.add_argument(
        "--compact",
        action="store_true",
        help="No space after ':' (or after ',' on single-line output)"
    )
    layout.add_argument(
        "--no-trailing-newline",
        action="store_true",
        help="Do not end output with a newline"
    )
    layout.add_argument(
        "--normalize-numbers",
        action="store_true",
        help="Render numbers in normalized form instead of as written"
    )
    layout.add_argument(
        "--ascii",
        action="store_true",
        help="Escape all non-ASCII characters as \\uXXXX"
    )
    layout.add_argument(
        "--rfc8785",
        action="store_true",
        help="RFC 8785 preset: utf16 key order, single line, compact, normalized numbers"
    )

    behaviour = parser.add_argument_group("behaviour")
    behaviour.add_argument(
        "--check",
        action="store_true",
        help="Do not rewrite files; exit 1 if any file is not already canonical"
    )
    behaviour.add_argument(
        "--digest",
        action="store_true",
        help="Print the sha256 digest of the canonical output instead of the output"
    )
    behaviour.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum nesting depth (default: {DEFAULT_MAX_DEPTH})"
    )
    behaviour.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of files processed in parallel"
    )
    behaviour.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    behaviour.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-file progress to stderr."
    )
    behaviour.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log records as JSON lines."
    )
    return parser


def _build_configs(args: argparse.Namespace) -> Tuple[SortConfig, FormatConfig]:
    """Turn CLI flags into SortConfig/FormatConfig, starting from the --rfc8785 preset if given."""
    if args.rfc8785:
        sort_fields = SortConfig.rfc8785().model_dump()
        format_fields = FormatConfig.rfc8785().model_dump()
    else:
        sort_fields = {}
        format_fields = {}

    if args.no_sort_keys:
        sort_fields["sort_keys"] = False
    if args.key_order is not None:
        sort_fields["key_order"] = KeyOrder(args.key_order)
    if args.sort_by_value is not None:
        sort_fields["sort_arrays_by"] = args.sort_by_value

    if hasattr(args, "indent"):
        format_fields["indent"] = args.indent
    if args.compact:
        format_fields["key_value_spacing"] = Spacing.COMPACT
    if args.no_trailing_newline:
        format_fields["trailing_newline"] = False
    if args.normalize_numbers:
        format_fields["number_rendering"] = NumberRendering.NORMALIZED
    if args.ascii:
        format_fields["ensure_ascii"] = True

    return SortConfig(**sort_fields), FormatConfig(**format_fields)


def _format_error(source: str, line: int, column: int, message: str) -> str:
    return f"{source}:{line}:{column}: {message}"


def _run_stdin(args: argparse.Namespace, sort_config: SortConfig, format_config: FormatConfig) -> None:
    data = sys.stdin.buffer.read()
    try:
        tree = parse(data, max_depth=args.max_depth)
    except ParseError as e:
        logger.debug("parse_failed", source="<stdin>", code=e.code.value, line=e.line, column=e.column)
        print(_format_error("<stdin>", e.line, e.column, e.message), file=sys.stderr)
        sys.exit(1)

    canonical = canonicalize(tree, sort_config)
    if args.digest:
        print(hash_canonical(canonical, sort_config, format_config))
        return
    output = serialize(canonical, format_config)
    if args.check:
        if output != data:
            if not args.quiet:
                print("would reformat <stdin>")
            sys.exit(1)
        return
    sys.stdout.buffer.write(output)
    sys.stdout.flush()


def _run_files(args: argparse.Namespace, sort_config: SortConfig, format_config: FormatConfig) -> None:
    write = not (args.check or args.digest)
    results = canonicalize_files(
        args.files,
        sort_config,
        format_config,
        max_depth=args.max_depth,
        write=write,
        workers=args.jobs,
    )

    failed = False
    for result in results:
        if not result.ok:
            failed = True
            error = result.error
            logger.debug("parse_failed", path=result.path, code=error.code, line=error.line, column=error.column)
            print(_format_error(result.path, error.line, error.column, error.message), file=sys.stderr)
            continue
        if args.digest:
            print(f"{result.digest}  {result.path}")
        elif args.check and result.changed:
            failed = True
            if not args.quiet:
                print(f"would reformat {result.path}")
        elif result.written:
            logger.info("file_canonicalized", path=result.path)
        else:
            logger.debug("file_unchanged", path=result.path)

    if args.check and not args.quiet:
        changed = sum(1 for result in results if result.ok and result.changed)
        print(f"{changed} of {len(results)} file(s) would be reformatted")
    if failed:
        sys.exit(1)


def main(argv: Optional[list[str]] = None):
    """Main CLI entry point for jsonsrt."""
    try:
        jsonsrt_version = get_version("jsonsrt")
    except PackageNotFoundError:
        jsonsrt_version = "dev"

    parser = _build_parser(jsonsrt_version)
    args = parser.parse_args(argv)

    if args.max_depth < 1:
        parser.error("--max-depth must be >= 1")
    if args.jobs < 1:
        parser.error("--jobs must be >= 1")
    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose are mutually exclusive")

    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    else:
        level = "WARNING"
    configure_logging(json_output=args.log_json, level=level)

    try:
        sort_config, format_config = _build_configs(args)
    except ValidationError as e:
        parser.error(str(e))

    if args.files:
        _run_files(args, sort_config, format_config)
    else:
        _run_stdin(args, sort_config, format_config)


if __name__ == "__main__":
    main()
