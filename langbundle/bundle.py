"""Serialisation of rooms, scripts and lines into the binary bundle format.

Layout (little-endian)::

    magic           8 bytes   b"SCVMTRS "
    line count      uint16    N
    index table     N x (uint16 line id, uint32 original offset, uint32 translated offset)
    room count      uint8
    rooms           uint8 room id, uint16 script count,
                    script count x (uint32 key, uint16 left, uint16 right)
    string blob     original bytes, 0, translated bytes, 0 for every line

Offsets are absolute file positions. The blob is ordered by original bytes
across the whole bundle while the index table is ordered by line id, so a
line's slot is found by direct indexing.
"""

from __future__ import annotations

import io
import os
import pathlib
import struct
from typing import List, Sequence

from .errors import CapacityError
from .ordering import line_sort_key
from .structures import IndexEntry, Line, Room

MAGIC = b"SCVMTRS "

COUNT = struct.Struct("<H")
INDEX_ENTRY = struct.Struct("<HII")
ROOM_COUNT = struct.Struct("<B")
ROOM_HEADER = struct.Struct("<BH")
SCRIPT_ENTRY = struct.Struct("<IHH")

INDEX_OFFSET = len(MAGIC) + COUNT.size

MAX_LINES = 0xFFFF
MAX_ROOMS = 0xFF
MAX_ROOM_ID = 0xFF
MAX_SCRIPTS = 0xFFFF
MAX_OFFSET = 0xFFFFFFFF


def check_capacity(rooms: Sequence[Room], lines: Sequence[Line]) -> None:
    """Raise :class:`CapacityError` when a value would not fit its field."""

    if len(lines) > MAX_LINES:
        raise CapacityError(
            f"Bundle holds {len(lines)} lines; the format allows at most {MAX_LINES}."
        )
    if len(rooms) > MAX_ROOMS:
        raise CapacityError(
            f"Bundle holds {len(rooms)} rooms; the format allows at most {MAX_ROOMS}."
        )
    for room in rooms:
        if room.room_id > MAX_ROOM_ID:
            raise CapacityError(
                f"Room id {room.room_id} does not fit in one byte (maximum {MAX_ROOM_ID})."
            )
        if len(room.scripts) > MAX_SCRIPTS:
            raise CapacityError(
                f"Room {room.room_id} holds {len(room.scripts)} scripts; "
                f"the format allows at most {MAX_SCRIPTS}."
            )


def build_bundle(rooms: Sequence[Room], lines: Sequence[Line]) -> bytes:
    """Lay out the bundle for numbered ``rooms`` and ``lines`` and return its bytes."""

    rooms = sorted(rooms, key=lambda room: room.room_id)
    check_capacity(rooms, lines)

    buffer = io.BytesIO()
    buffer.write(MAGIC)
    buffer.write(COUNT.pack(len(lines)))

    # Reserve the index table; it is filled once the blob offsets are known.
    buffer.write(bytes(INDEX_ENTRY.size * len(lines)))

    buffer.write(ROOM_COUNT.pack(len(rooms)))
    for room in rooms:
        scripts = room.ordered_scripts()
        buffer.write(ROOM_HEADER.pack(room.room_id, len(scripts)))
        for script in scripts:
            buffer.write(SCRIPT_ENTRY.pack(script.key, script.left, script.right))

    entries: List[IndexEntry] = []
    for line in sorted(lines, key=line_sort_key):
        original_offset = buffer.tell()
        buffer.write(line.original)
        buffer.write(b"\x00")
        translated_offset = buffer.tell()
        buffer.write(line.translated)
        buffer.write(b"\x00")
        entries.append(
            IndexEntry(
                line_id=line.line_id,
                original_offset=original_offset,
                translated_offset=translated_offset,
            )
        )

    if buffer.tell() > MAX_OFFSET:
        raise CapacityError(
            f"Bundle would be {buffer.tell()} bytes; offsets are limited to 32 bits."
        )

    entries.sort(key=lambda entry: entry.line_id)
    buffer.seek(INDEX_OFFSET)
    for entry in entries:
        buffer.write(
            INDEX_ENTRY.pack(entry.line_id, entry.original_offset, entry.translated_offset)
        )

    return buffer.getvalue()


def write_bundle(path: pathlib.Path, data: bytes) -> None:
    """Write ``data`` to ``path`` so that the destination is never left half-written."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp.{os.getpid()}")

    try:
        with tmp_path.open("wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
