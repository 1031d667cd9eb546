"""Byte ordering of engine strings and line id assignment."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, List

from .structures import Line, Room


def compare_res_string(a: bytes, b: bytes) -> int:
    """Compare two engine strings the way the runtime's C string compare does.

    The scan stops at the first differing byte or as soon as either string
    runs out; a missing byte reads as 0. Zero bytes inside both strings do
    not end the scan.
    """

    index = 0
    len_a = len(a)
    len_b = len(b)
    while True:
        c1 = a[index] if index < len_a else 0
        c2 = b[index] if index < len_b else 0
        if index >= len_a or index >= len_b or c1 != c2:
            return c1 - c2
        index += 1


res_string_key = cmp_to_key(compare_res_string)


def line_sort_key(line: Line):
    return res_string_key(line.original)


def assign_line_ids(rooms: Iterable[Room]) -> List[Line]:
    """Sort every script and number its lines in traversal order.

    Rooms are visited by ascending id, scripts by ascending key and lines in
    byte order of their original text. Each script and room records the
    inclusive ``[left, right]`` range of ids its lines received. Returns all
    lines ordered by id.
    """

    ordered: List[Line] = []
    next_id = 0
    for room in sorted(rooms, key=lambda item: item.room_id):
        room.left = next_id
        room.right = next_id + room.line_count - 1

        script_left = next_id
        for script in room.ordered_scripts():
            script.left = script_left
            script.right = script_left + len(script.lines) - 1
            script.lines.sort(key=line_sort_key)

            assert next_id == script.left, f"{script} does not start at {next_id}"
            for line in script.lines:
                line.assign_id(next_id)
                next_id += 1
                ordered.append(line)
            script_left += len(script.lines)

        assert next_id == room.right + 1, f"{room} does not end at {next_id - 1}"
    return ordered
