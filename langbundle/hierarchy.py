"""Grouping of parsed lines into rooms and scripts, and duplicate removal."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .errors import LineFormatError
from .escapes import decode_original, decode_translated
from .structures import Line, Room, Script, ScriptKind
from .tags import parse_tag, strip_translated_prefix

SPACE_ONLY = b" "


def parse_line_pair(
    line_number: int,
    original: str,
    translated: str,
    encoding: str,
) -> Optional[Line]:
    """Turn one pair of input lines into a :class:`Line`.

    Returns ``None`` for lines without a script tag. Format errors are
    re-raised with the 1-based ``line_number`` and the raw original text.
    """

    try:
        tag = parse_tag(original)
        if tag is None:
            return None
        translated_text = strip_translated_prefix(translated)
        return Line(
            room_id=tag.room_id,
            script_kind=tag.script_kind,
            script_id=tag.script_id,
            original=decode_original(tag.text),
            translated=decode_translated(translated_text, encoding),
            original_text=tag.text,
            translated_text=translated_text,
            line_number=line_number,
        )
    except LineFormatError as exc:
        raise exc.locate(line_number, original)


class HierarchyBuilder:
    """Collects lines into rooms and scripts keyed by room id and script key."""

    def __init__(self) -> None:
        self.rooms: Dict[int, Room] = {}
        self.dropped: int = 0
        self.duplicates: int = 0

    def add(self, line: Line) -> bool:
        """Insert a line; returns ``False`` when the line is filtered out."""

        if line.script_kind == ScriptKind.UNKNOWN and line.original == SPACE_ONLY:
            self.dropped += 1
            return False

        room = self.rooms.get(line.room_id)
        if room is None:
            room = self.rooms[line.room_id] = Room(room_id=line.room_id)

        key = line.script_key
        script = room.scripts.get(key)
        if script is None:
            script = room.scripts[key] = Script(key=key)

        script.lines.append(line)
        return True

    def deduplicate(self) -> int:
        """Keep the first of every identical (original, translated) pair per script."""

        removed = 0
        for room in self.rooms.values():
            for script in room.scripts.values():
                unique: Dict[Tuple[bytes, bytes], Line] = {}
                for line in script.lines:
                    unique.setdefault((line.original, line.translated), line)
                removed += len(script.lines) - len(unique)
                script.lines = list(unique.values())
        self.duplicates += removed
        return removed

    def ordered_rooms(self) -> List[Room]:
        return [self.rooms[room_id] for room_id in sorted(self.rooms)]

    @property
    def script_count(self) -> int:
        return sum(len(room.scripts) for room in self.rooms.values())
