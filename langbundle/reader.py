"""Read-side access to a language bundle, as the game runtime performs it."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .bundle import (
    COUNT,
    INDEX_ENTRY,
    INDEX_OFFSET,
    MAGIC,
    ROOM_COUNT,
    ROOM_HEADER,
    SCRIPT_ENTRY,
)
from .errors import BundleFormatError
from .structures import IndexEntry


@dataclass
class Bundle:
    """A parsed bundle: index table, room/script ranges and the raw file bytes."""

    data: bytes
    index: List[IndexEntry]
    rooms: Dict[int, Dict[int, Tuple[int, int]]] = field(default_factory=dict)

    def read_string(self, offset: int) -> bytes:
        end = self.data.find(b"\x00", offset)
        if end == -1:
            raise BundleFormatError(f"Unterminated string at offset {offset}.")
        return self.data[offset:end]

    def lookup(self, line_id: int) -> Tuple[bytes, bytes]:
        """Return the original and translated bytes stored for ``line_id``."""

        if not 0 <= line_id < len(self.index):
            raise KeyError(line_id)
        entry = self.index[line_id]
        return (
            self.read_string(entry.original_offset),
            self.read_string(entry.translated_offset),
        )

    def script_range(self, room_id: int, key: int) -> Optional[Tuple[int, int]]:
        return self.rooms.get(room_id, {}).get(key)

    def script_lines(self, room_id: int, key: int) -> List[Tuple[int, bytes, bytes]]:
        span = self.script_range(room_id, key)
        if span is None:
            return []
        left, right = span
        return [(line_id, *self.lookup(line_id)) for line_id in range(left, right + 1)]


def _unpack(layout: struct.Struct, data: bytes, offset: int) -> tuple:
    try:
        return layout.unpack_from(data, offset)
    except struct.error as exc:
        raise BundleFormatError(f"Bundle truncated at offset {offset}.") from exc


def read_bundle(data: bytes) -> Bundle:
    """Parse the header, index table and room table of a bundle."""

    if data[:len(MAGIC)] != MAGIC:
        raise BundleFormatError("Not a language bundle: bad magic.")

    (count,) = _unpack(COUNT, data, len(MAGIC))
    offset = INDEX_OFFSET
    index: List[IndexEntry] = []
    for slot in range(count):
        line_id, original_offset, translated_offset = _unpack(INDEX_ENTRY, data, offset)
        if line_id != slot:
            raise BundleFormatError(
                f"Index slot {slot} holds line id {line_id}; the table must be ordered by id."
            )
        index.append(IndexEntry(line_id, original_offset, translated_offset))
        offset += INDEX_ENTRY.size

    (room_count,) = _unpack(ROOM_COUNT, data, offset)
    offset += ROOM_COUNT.size
    bundle = Bundle(data=data, index=index)
    for _ in range(room_count):
        room_id, script_count = _unpack(ROOM_HEADER, data, offset)
        offset += ROOM_HEADER.size
        scripts = bundle.rooms.setdefault(room_id, {})
        for _ in range(script_count):
            key, left, right = _unpack(SCRIPT_ENTRY, data, offset)
            offset += SCRIPT_ENTRY.size
            scripts[key] = (left, right)

    return bundle
