"""Parsing of the bracketed script tags that prefix original-language lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .errors import TagFormatError
from .structures import ScriptKind

TAG_KINDS: Dict[str, ScriptKind] = {
    # Object code and verbs, scoped to their room.
    "VERB": ScriptKind.OBJECT,
    "OC": ScriptKind.OBJECT,
    "OCv1": ScriptKind.OBJECT,
    "OCv2": ScriptKind.OBJECT,
    "OCv3": ScriptKind.OBJECT,
    "OBNA": ScriptKind.OBJECT,
    "ONv1": ScriptKind.OBJECT,
    "ONv2": ScriptKind.OBJECT,
    # Global scripts.
    "SCRP": ScriptKind.GLOBAL,
    "SC": ScriptKind.GLOBAL,
    "SCv1": ScriptKind.GLOBAL,
    "SCv2": ScriptKind.GLOBAL,
    "SCv3": ScriptKind.GLOBAL,
    # Local, entry and exit scripts.
    "LSCR": ScriptKind.LOCAL,
    "LS": ScriptKind.LOCAL,
    "LSv3": ScriptKind.LOCAL,
    "ENCD": ScriptKind.LOCAL,
    "EN": ScriptKind.LOCAL,
    "ENv3": ScriptKind.LOCAL,
    "EXCD": ScriptKind.LOCAL,
    "EX": ScriptKind.LOCAL,
    "EXv3": ScriptKind.LOCAL,
}

# "[RRR-" precedes the type tag, four index digits precede "]".
TYPE_TAG_START = 5
INDEX_DIGITS = 4


@dataclass(frozen=True)
class ParsedTag:
    """Identity of the script a line belongs to, plus the text after the tag."""

    room_id: int
    script_kind: ScriptKind
    script_id: int
    type_tag: str
    text: str


def _parse_digits(value: str, expected: int, what: str) -> int:
    if len(value) != expected or not (value.isascii() and value.isdigit()):
        raise TagFormatError(f"Invalid {what} {value!r} in script tag")
    return int(value)


def _resolve_kind(line: str, closing: int) -> tuple[str, ScriptKind]:
    width = 2 if line[7:8] == "#" else 4
    type_tag = line[TYPE_TAG_START:TYPE_TAG_START + width]
    kind = TAG_KINDS.get(type_tag)
    if kind is not None:
        return type_tag, kind

    # Compact tags such as "[001-SC0001]" carry no "#" separator.
    span = line[TYPE_TAG_START:closing - INDEX_DIGITS].rstrip("#")
    kind = TAG_KINDS.get(span)
    if kind is not None:
        return span, kind
    return type_tag, ScriptKind.UNKNOWN


def parse_tag(line: str) -> Optional[ParsedTag]:
    """Parse the ``[RRR-XXXX####]`` prefix of an original-language line.

    Blank lines and lines that do not start with ``[`` carry no tag and
    return ``None``; the caller skips them. A line that starts with ``[``
    but does not have the expected shape raises :class:`TagFormatError`.

    Global scripts always live in room 0 and object/verb scripts are keyed by
    room alone, so their script id is forced to 0. Unrecognised type tags are
    kept under :attr:`ScriptKind.UNKNOWN`.
    """

    if not line.strip():
        return None
    if not line.startswith("["):
        return None

    closing = line.find("]")
    if closing == -1:
        raise TagFormatError("Unterminated script tag")
    if closing - INDEX_DIGITS <= TYPE_TAG_START:
        raise TagFormatError("Script tag is too short")
    if line[4] != "-":
        raise TagFormatError("Missing '-' after the room number in script tag")

    room_id = _parse_digits(line[1:4], 3, "room number")
    script_id = _parse_digits(line[closing - INDEX_DIGITS:closing], INDEX_DIGITS, "script index")
    type_tag, kind = _resolve_kind(line, closing)

    if kind == ScriptKind.GLOBAL:
        room_id = 0
    elif kind == ScriptKind.OBJECT:
        script_id = 0

    return ParsedTag(
        room_id=room_id,
        script_kind=kind,
        script_id=script_id,
        type_tag=type_tag,
        text=line[closing + 1:],
    )


def strip_translated_prefix(line: str) -> str:
    """Drop the translated line's own bracketed prefix, if it has one."""

    if not line.startswith("["):
        return line
    closing = line.find("]")
    if closing == -1:
        return line
    return line[closing + 1:]
