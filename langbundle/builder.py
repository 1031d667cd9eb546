"""High-level orchestration of a bundle build."""

from __future__ import annotations

import json
import pathlib
import re
import sys
import time
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from .bundle import build_bundle, write_bundle
from .configuration import LangBundleConfig
from .errors import InputDecodeError, InputShapeError, LangBundleError, OverwriteRefusedError
from .hierarchy import HierarchyBuilder, parse_line_pair
from .ordering import assign_line_ids
from .structures import Line, Room, ScriptKind

LINE_BREAK_PATTERN = re.compile(r"\r\n|\n|\r")


@dataclass
class BuildResult:
    """In-memory outcome of the pipeline, before anything touches the disk."""

    rooms: List[Room]
    lines: List[Line]
    data: bytes
    input_lines: int
    tagged_lines: int
    dropped_lines: int
    duplicate_lines: int
    unknown_tag_lines: List[Line] = field(default_factory=list)

    @property
    def script_count(self) -> int:
        return sum(len(room.scripts) for room in self.rooms)


@dataclass
class BuildSummary:
    """Report returned after writing a bundle."""

    original_path: pathlib.Path
    translated_path: pathlib.Path
    output_path: pathlib.Path
    input_lines: int
    tagged_lines: int
    skipped_lines: int
    dropped_lines: int
    duplicate_lines: int
    unknown_tag_lines: int
    bundled_lines: int
    rooms: int
    scripts: int
    bytes_written: int
    elapsed_seconds: float


def read_lines(path: pathlib.Path, encoding: str) -> List[str]:
    """Read a text dump and split it on CR, LF or CRLF only."""

    text = path.read_bytes().decode(encoding)
    if not text:
        return []
    lines = LINE_BREAK_PATTERN.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def build_from_lines(
    original_lines: Sequence[str],
    translated_lines: Sequence[str],
    encoding: str,
    *,
    debug: bool = False,
) -> BuildResult:
    """Run the whole pipeline on decoded input lines and return the bundle bytes.

    ``encoding`` is the text encoding the translated strings are stored in.
    """

    if len(original_lines) != len(translated_lines):
        raise InputShapeError(
            f"Input line counts differ: {len(original_lines)} original lines, "
            f"{len(translated_lines)} translated lines."
        )

    hierarchy = HierarchyBuilder()
    tagged = 0
    unknown: List[Line] = []
    for number, (original, translated) in enumerate(
        zip(original_lines, translated_lines), start=1
    ):
        line = parse_line_pair(number, original, translated, encoding)
        if line is None:
            continue
        tagged += 1
        if hierarchy.add(line) and line.script_kind == ScriptKind.UNKNOWN:
            unknown.append(line)
        _log_debug(debug, "line.parsed", line)

    hierarchy.deduplicate()
    rooms = hierarchy.ordered_rooms()
    lines = assign_line_ids(rooms)
    for room in rooms:
        _log_debug(debug, "room.range", [str(room)] + [str(s) for s in room.ordered_scripts()])

    data = build_bundle(rooms, lines)
    return BuildResult(
        rooms=rooms,
        lines=lines,
        data=data,
        input_lines=len(original_lines),
        tagged_lines=tagged,
        dropped_lines=hierarchy.dropped,
        duplicate_lines=hierarchy.duplicates,
        unknown_tag_lines=unknown,
    )


class BundleBuilder:
    """Coordinates reading the dumps, building the bundle and writing it."""

    def __init__(
        self,
        *,
        original_path: pathlib.Path,
        translated_path: pathlib.Path,
        output_path: pathlib.Path,
        settings: LangBundleConfig,
    ) -> None:
        self.original_path = original_path
        self.translated_path = translated_path
        self.output_path = output_path
        self.original_encoding = settings.LANGBUNDLE_ORIGINAL_ENCODING
        self.translated_encoding = settings.LANGBUNDLE_TRANSLATED_ENCODING
        self.verbose = settings.LANGBUNDLE_VERBOSE
        self.debug = settings.LANGBUNDLE_DEBUG

    def run(self) -> BuildSummary:
        start_time = time.time()

        original_lines = self._read(self.original_path, self.original_encoding)
        translated_lines = self._read(self.translated_path, self.translated_encoding)
        if self.verbose:
            print(
                f"Read {len(original_lines)} original and "
                f"{len(translated_lines)} translated lines."
            )

        result = build_from_lines(
            original_lines,
            translated_lines,
            self.translated_encoding,
            debug=self.debug,
        )
        if self.verbose:
            for line in result.unknown_tag_lines:
                print(f"Unrecognised script tag on line {line.line_number}: {line}")
            print(
                f"Prepared {len(result.lines)} lines in {len(result.rooms)} rooms, "
                f"{result.script_count} scripts."
            )

        write_bundle(self.output_path, result.data)
        if self.verbose:
            print(f"Wrote {len(result.data)} bytes to {self.output_path}.")

        return BuildSummary(
            original_path=self.original_path,
            translated_path=self.translated_path,
            output_path=self.output_path,
            input_lines=result.input_lines,
            tagged_lines=result.tagged_lines,
            skipped_lines=result.input_lines - result.tagged_lines,
            dropped_lines=result.dropped_lines,
            duplicate_lines=result.duplicate_lines,
            unknown_tag_lines=len(result.unknown_tag_lines),
            bundled_lines=len(result.lines),
            rooms=len(result.rooms),
            scripts=result.script_count,
            bytes_written=len(result.data),
            elapsed_seconds=time.time() - start_time,
        )

    def _read(self, path: pathlib.Path, encoding: str) -> List[str]:
        try:
            return read_lines(path, encoding)
        except UnicodeDecodeError as exc:
            raise InputDecodeError(f"{path} is not valid {encoding} text: {exc}") from exc


def _log_debug(enabled: bool, label: str, payload: Any) -> None:
    """Emit structured debug information when enabled."""

    if not enabled:
        return
    if isinstance(payload, (dict, list)):
        message = json.dumps(payload, ensure_ascii=False, indent=2)
    else:
        message = str(payload)
    print(f"[langbundle][debug] {label}:\n{message}", file=sys.stderr)


def validate_paths(
    original_path: pathlib.Path,
    translated_path: pathlib.Path,
    output_path: pathlib.Path,
) -> None:
    """Validate the input and output path combination."""

    for label, path in (("Original", original_path), ("Translated", translated_path)):
        if not path.exists():
            raise FileNotFoundError(f"{label} text file not found: {path}")
        if not path.is_file():
            raise LangBundleError(f"{label} text path must be a file: {path}")

    resolved_output = output_path.resolve()
    if resolved_output in (original_path.resolve(), translated_path.resolve()):
        raise OverwriteRefusedError(
            "The output path matches one of the input files. Refusing to overwrite it."
        )
