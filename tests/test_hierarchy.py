from __future__ import annotations

import unittest

from langbundle.errors import EscapeFormatError, TagFormatError
from langbundle.hierarchy import HierarchyBuilder, parse_line_pair
from langbundle.structures import Line, ScriptKind, make_script_key


def make_line(original: bytes, translated: bytes, *, kind=ScriptKind.LOCAL, script_id=1, room_id=2) -> Line:
    return Line(
        room_id=room_id,
        script_kind=kind,
        script_id=script_id,
        original=original,
        translated=translated,
    )


class ParseLinePairTests(unittest.TestCase):

    def test_tagged_pair_becomes_line(self) -> None:
        line = parse_line_pair(1, "[001-SC0001]Hello", "[001] 안녕", "cp949")

        self.assertEqual(line.room_id, 0)
        self.assertEqual(line.script_kind, ScriptKind.GLOBAL)
        self.assertEqual(line.script_key, make_script_key(ScriptKind.GLOBAL, 1))
        self.assertEqual(line.original, b"Hello")
        self.assertEqual(line.translated, " 안녕".encode("cp949"))
        self.assertEqual(line.original_text, "Hello")
        self.assertEqual(line.translated_text, " 안녕")
        self.assertEqual(line.line_number, 1)
        self.assertIsNone(line.line_id)

    def test_untagged_pair_is_skipped(self) -> None:
        self.assertIsNone(parse_line_pair(3, "comment", "주석", "cp949"))
        self.assertIsNone(parse_line_pair(4, "   ", "", "cp949"))

    def test_escape_errors_name_the_input_line(self) -> None:
        with self.assertRaises(EscapeFormatError) as ctx:
            parse_line_pair(7, "[001-SC0001]bad\\9", "[001] ok", "cp949")

        self.assertEqual(ctx.exception.line_number, 7)
        self.assertEqual(ctx.exception.raw_text, "[001-SC0001]bad\\9")
        self.assertIn("Line 7", str(ctx.exception))

    def test_translated_escape_errors_are_located_too(self) -> None:
        with self.assertRaises(EscapeFormatError) as ctx:
            parse_line_pair(9, "[001-SC0001]fine", "[001] \\300", "cp949")

        self.assertEqual(ctx.exception.line_number, 9)

    def test_tag_errors_name_the_input_line(self) -> None:
        with self.assertRaises(TagFormatError) as ctx:
            parse_line_pair(12, "[001-SC0001", "x", "cp949")

        self.assertEqual(ctx.exception.line_number, 12)


class HierarchyBuilderTests(unittest.TestCase):

    def test_space_only_line_with_unknown_tag_is_dropped(self) -> None:
        builder = HierarchyBuilder()

        self.assertFalse(builder.add(make_line(b" ", b" ", kind=ScriptKind.UNKNOWN)))
        self.assertTrue(builder.add(make_line(b" ", b" ", kind=ScriptKind.GLOBAL)))
        self.assertTrue(builder.add(make_line(b"  ", b" ", kind=ScriptKind.UNKNOWN)))

        self.assertEqual(builder.dropped, 1)
        self.assertEqual(sum(room.line_count for room in builder.rooms.values()), 2)

    def test_lines_are_grouped_by_room_and_script(self) -> None:
        builder = HierarchyBuilder()
        builder.add(make_line(b"a", b"1", room_id=5, script_id=1))
        builder.add(make_line(b"b", b"2", room_id=5, script_id=2))
        builder.add(make_line(b"c", b"3", room_id=5, script_id=1))
        builder.add(make_line(b"d", b"4", room_id=1, script_id=1))

        self.assertEqual([room.room_id for room in builder.ordered_rooms()], [1, 5])
        self.assertEqual(builder.script_count, 3)
        room5 = builder.rooms[5]
        first = room5.scripts[make_script_key(ScriptKind.LOCAL, 1)]
        self.assertEqual([line.original for line in first.lines], [b"a", b"c"])

    def test_duplicates_collapse_to_first_seen(self) -> None:
        builder = HierarchyBuilder()
        first = make_line(b"A", b"x")
        copy = make_line(b"A", b"x")
        other_translation = make_line(b"A", b"y")
        other_script = make_line(b"A", b"x", script_id=2)
        for line in (first, copy, other_translation, other_script):
            builder.add(line)

        removed = builder.deduplicate()

        self.assertEqual(removed, 1)
        self.assertEqual(builder.duplicates, 1)
        script = builder.rooms[2].scripts[make_script_key(ScriptKind.LOCAL, 1)]
        self.assertEqual(len(script.lines), 2)
        self.assertIs(script.lines[0], first)
        self.assertIs(script.lines[1], other_translation)

    def test_deduplicate_is_idempotent(self) -> None:
        builder = HierarchyBuilder()
        for original in (b"a", b"b", b"a", b"c", b"b"):
            builder.add(make_line(original, b"t"))

        self.assertEqual(builder.deduplicate(), 2)
        self.assertEqual(builder.deduplicate(), 0)
        self.assertEqual(builder.duplicates, 2)


if __name__ == "__main__":
    unittest.main()
