"""Core data structures for the language bundle builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional


class ScriptKind(IntEnum):
    """Coarse category of the engine script a line belongs to."""

    UNKNOWN = -1
    OBJECT = 1
    GLOBAL = 2
    LOCAL = 3


def make_script_key(kind: int, script_id: int) -> int:
    """Pack a script kind and id into the unsigned 32-bit key used on disk."""

    return ((kind << 16) | script_id) & 0xFFFFFFFF


@dataclass(eq=False)
class Line:
    """A single translatable line with its raw engine bytes."""

    room_id: int
    script_kind: ScriptKind
    script_id: int
    original: bytes
    translated: bytes
    original_text: str = ""
    translated_text: str = ""
    line_number: int = 0
    line_id: Optional[int] = None

    @property
    def script_key(self) -> int:
        return make_script_key(self.script_kind, self.script_id)

    def assign_id(self, line_id: int) -> None:
        if self.line_id is not None:
            raise ValueError(f"Line already has id {self.line_id}: {self}")
        self.line_id = line_id

    def __str__(self) -> str:
        return (
            f"#{self.line_id}:{int(self.script_kind)}/{self.script_id} "
            f'"{self.original_text}"'
        )


@dataclass
class Script:
    """Lines of one (kind, id) script and the ordinal range they occupy."""

    key: int
    lines: List[Line] = field(default_factory=list)
    left: int = 0
    right: int = -1

    def __str__(self) -> str:
        return f"Script {self.key >> 16}/{self.key & 0xFFFF}: {self.left}..{self.right}"


@dataclass
class Room:
    """Scripts grouped under one room id (0 is the global scope)."""

    room_id: int
    scripts: Dict[int, Script] = field(default_factory=dict)
    left: int = 0
    right: int = -1

    def ordered_scripts(self) -> List[Script]:
        """Return the scripts ascending by key."""

        return [self.scripts[key] for key in sorted(self.scripts)]

    @property
    def line_count(self) -> int:
        return sum(len(script.lines) for script in self.scripts.values())

    def __str__(self) -> str:
        return f"Room {self.room_id}: {self.left}..{self.right}"


@dataclass(frozen=True)
class IndexEntry:
    """One slot of the bundle's index table."""

    line_id: int
    original_offset: int
    translated_offset: int
