"""Command line interface for the language bundle builder."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional

from .builder import BuildSummary, BundleBuilder, validate_paths
from .configuration import LangBundleConfig, get_settings
from .errors import ErrorCategory, LangBundleError

CATEGORY_LABELS = {
    ErrorCategory.INPUT_SHAPE: "Inputs are not line-aligned.",
    ErrorCategory.FORMAT: "Invalid input format.",
    ErrorCategory.CAPACITY: "Bundle capacity exceeded.",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langbundle",
        description=(
            "Build a binary language bundle from an original and a translated script dump."
        ),
    )
    parser.add_argument(
        "-e",
        "--original",
        required=True,
        help="Path to the original-language script dump.",
    )
    parser.add_argument(
        "-k",
        "--translated",
        required=True,
        help="Path to the translated script dump (line-aligned with the original).",
    )
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output bundle file path.",
    )
    return parser


def execute_build(
    *,
    original_file: str,
    translated_file: str,
    output_file: str,
    settings: LangBundleConfig,
) -> tuple[int, BuildSummary | None, str | None]:
    """Execute a build and return the exit code, summary, and message."""

    original_path = pathlib.Path(original_file).expanduser().resolve()
    translated_path = pathlib.Path(translated_file).expanduser().resolve()
    output_path = pathlib.Path(output_file).expanduser().resolve()

    try:
        validate_paths(original_path, translated_path, output_path)
    except FileNotFoundError as exc:
        return 1, None, str(exc)
    except LangBundleError as exc:
        return 1, None, str(exc)

    builder = BundleBuilder(
        original_path=original_path,
        translated_path=translated_path,
        output_path=output_path,
        settings=settings,
    )

    try:
        summary = builder.run()
    except LangBundleError as exc:
        label = CATEGORY_LABELS.get(exc.category)
        return 1, None, f"{label} {exc}" if label else str(exc)
    except OSError as exc:
        return 1, None, f"Could not read or write a file: {exc}"
    except KeyboardInterrupt:
        return 2, None, "Build interrupted by user."

    return 0, summary, None


def print_summary(summary: BuildSummary) -> None:
    """Output a short report once the bundle is written."""

    print("\nBundle complete.")
    print(f"  Original file:   {summary.original_path}")
    print(f"  Translated file: {summary.translated_path}")
    print(f"  Output file:     {summary.output_path}")
    print(
        "  Lines:           "
        f"{summary.bundled_lines} bundled / {summary.input_lines} input "
        f"({summary.skipped_lines} untagged, {summary.dropped_lines} dropped, "
        f"{summary.duplicate_lines} duplicates)"
    )
    print(f"  Rooms:           {summary.rooms} ({summary.scripts} scripts)")
    if summary.unknown_tag_lines:
        print(f"  Unknown tags:    {summary.unknown_tag_lines} lines")
    print(f"  Bundle size:     {summary.bytes_written} bytes")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except LangBundleError as exc:
        print(exc, file=sys.stderr)
        return 1

    exit_code, summary, message = execute_build(
        original_file=args.original,
        translated_file=args.translated,
        output_file=args.output,
        settings=settings,
    )

    if message:
        print(message, file=sys.stderr)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
