"""Command line interface for the i18nify rewriter."""

from __future__ import annotations

import argparse
import pathlib
import re
import sys
from typing import Iterable, Optional, Sequence

from .configuration import get_settings
from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorRecord,
    I18nifyError,
    OverwriteRefusedError,
    RewriteDefect,
)
from .runner import RewriteRunner, RewriteSummary, validate_paths
from .structures import DEFAULT_CALL_NAME, TextShape

DEFAULT_INPUT = "index.js"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18nify",
        description=(
            "Replace Chinese string literals in a JavaScript/JSX module with "
            "i18n(\"<pinyin key>\") calls."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="path",
        help="Input file, then output file (used when -i/-o are not given).",
    )
    parser.add_argument(
        "-i",
        "--input",
        help=f"Source file to rewrite (default: {DEFAULT_INPUT} in the working directory).",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Destination file. Defaults to <name>.cache<ext> next to the input.",
    )
    parser.add_argument(
        "-c",
        "--call-name",
        help=f"Function wrapped around generated keys (default: {DEFAULT_CALL_NAME}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print every recorded rewrite instruction to stderr.",
    )
    return parser


def derive_output_path(input_path: pathlib.Path) -> pathlib.Path:
    """Place ``.cache`` between the input's name and its extension."""

    return input_path.with_name(f"{input_path.stem}.cache{input_path.suffix}")


def resolve_paths(
    *,
    input_option: str | None,
    output_option: str | None,
    positionals: Sequence[str],
    cwd: pathlib.Path,
) -> tuple[pathlib.Path, pathlib.Path]:
    """Resolve the input and output paths; named options win over positionals."""

    input_value = input_option or (positionals[0] if len(positionals) > 0 else None)
    output_value = output_option or (positionals[1] if len(positionals) > 1 else None)

    input_path = pathlib.Path(input_value or DEFAULT_INPUT).expanduser()
    if not input_path.is_absolute():
        input_path = cwd / input_path
    input_path = input_path.resolve()

    if output_value is None:
        return input_path, derive_output_path(input_path)

    output_path = pathlib.Path(output_value).expanduser()
    if not output_path.is_absolute():
        output_path = cwd / output_path
    return input_path, output_path.resolve()


def execute_rewrite(
    *,
    input_path: pathlib.Path,
    output_path: pathlib.Path,
    call_name: str,
    pattern: re.Pattern[str],
    verbose: bool,
    debug: bool,
) -> tuple[int, RewriteSummary | None, str | None]:
    """Execute a rewrite run and return the exit code, summary, and message."""

    try:
        validate_paths(input_path, output_path)
    except FileNotFoundError as exc:
        return 1, None, ErrorRecord(ErrorCategory.FILE_IO, str(exc)).describe()
    except OverwriteRefusedError as exc:
        return 1, None, ErrorRecord(ErrorCategory.ARGUMENT, str(exc)).describe()
    except I18nifyError as exc:
        return 1, None, ErrorRecord(ErrorCategory.ARGUMENT, str(exc)).describe()

    output_path.parent.mkdir(parents=True, exist_ok=True)

    runner = RewriteRunner(
        input_path=input_path,
        output_path=output_path,
        call_name=call_name,
        pattern=pattern,
        verbose=verbose,
        debug=debug,
    )

    try:
        summary = runner.run()
    except UnicodeDecodeError as exc:
        record = ErrorRecord(ErrorCategory.FILE_IO, f"{input_path} is not UTF-8 text", str(exc))
        return 1, None, record.describe()
    except OSError as exc:
        record = ErrorRecord(ErrorCategory.FILE_IO, "Could not read or write a file", str(exc))
        return 1, None, record.describe()
    except RewriteDefect as exc:
        record = ErrorRecord(ErrorCategory.DEFECT, "Internal rewrite error", str(exc))
        return 1, None, record.describe()
    except I18nifyError as exc:
        return 1, None, ErrorRecord(ErrorCategory.OTHER, str(exc)).describe()
    except KeyboardInterrupt:
        return 2, None, "Rewrite interrupted by user."

    if not summary.written:
        message = "\n".join(summary.notes) or "No output was written."
        return 1, summary, ErrorRecord(ErrorCategory.PARSE, message).describe()
    return 0, summary, None


def print_summary(summary: RewriteSummary) -> None:
    """Output a friendly report once processing completes."""

    if not summary.written:
        return
    print("\nRewrite complete.")
    print(f"  Input file:      {summary.input_path}")
    print(f"  Output file:     {summary.output_path}")
    print(f"  Replacements:    {summary.total_replacements}")
    for shape in TextShape:
        count = summary.replacements.get(shape, 0)
        if count:
            print(f"    {shape.value + ':':<18} {count}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if len(args.paths) > 2:
        parser.error("at most two positional paths (input, output) are accepted")

    try:
        settings = get_settings()
        pattern = settings.compiled_pattern()
    except ConfigurationError as exc:
        print(exc)
        return 1

    call_name = args.call_name or settings.I18NIFY_CALL_NAME
    debug = bool(args.debug or settings.I18NIFY_DEBUG)

    input_path, output_path = resolve_paths(
        input_option=args.input,
        output_option=args.output,
        positionals=args.paths,
        cwd=pathlib.Path.cwd(),
    )

    exit_code, summary, message = execute_rewrite(
        input_path=input_path,
        output_path=output_path,
        call_name=call_name,
        pattern=pattern,
        verbose=args.verbose,
        debug=debug,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
