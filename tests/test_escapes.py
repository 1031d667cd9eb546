from __future__ import annotations

import unittest

from langbundle.errors import EscapeFormatError
from langbundle.escapes import decode_original, decode_translated, escape_bytes


class DecodeOriginalTests(unittest.TestCase):

    def test_plain_text_maps_one_character_to_one_byte(self) -> None:
        self.assertEqual(decode_original("Hello"), b"Hello")
        self.assertEqual(decode_original("café"), b"caf\xe9")

    def test_doubled_backslash_is_one_backslash_byte(self) -> None:
        self.assertEqual(decode_original("A\\\\B"), b"A\\B")

    def test_three_digit_escapes_become_raw_bytes(self) -> None:
        self.assertEqual(decode_original("\\255\\000x\\010"), b"\xff\x00x\n")

    def test_escape_followed_by_more_digits(self) -> None:
        self.assertEqual(decode_original("\\0651"), b"A1")

    def test_malformed_escapes_raise(self) -> None:
        for text in ("\\256", "\\999", "\\12", "\\abc", "abc\\", "\\1a2", "\\١٢٣"):
            with self.subTest(text=text):
                with self.assertRaises(EscapeFormatError):
                    decode_original(text)

    def test_characters_beyond_one_byte_raise(self) -> None:
        with self.assertRaises(EscapeFormatError):
            decode_original("가")


class DecodeTranslatedTests(unittest.TestCase):

    def test_characters_use_target_encoding(self) -> None:
        self.assertEqual(decode_translated("안녕", "cp949"), "안녕".encode("cp949"))

    def test_escapes_mix_with_encoded_characters(self) -> None:
        self.assertEqual(
            decode_translated("\\255가\\\\", "cp949"),
            b"\xff" + "가".encode("cp949") + b"\\",
        )

    def test_unencodable_character_raises(self) -> None:
        with self.assertRaises(EscapeFormatError):
            decode_translated("\U0001F600", "cp949")

    def test_malformed_escape_raises(self) -> None:
        with self.assertRaises(EscapeFormatError):
            decode_translated("안녕\\", "cp949")


class EscapeRoundTripTests(unittest.TestCase):

    def test_escape_bytes_uses_digits_and_doubled_backslash(self) -> None:
        self.assertEqual(escape_bytes(b"a\\\xff\x07"), "a\\\\\\255\\007")

    def test_decode_reverses_escape(self) -> None:
        samples = [
            b"",
            b"Plain text",
            b"\\\\\\",
            b"\xff\x0a\x00\x01speech",
            bytes(range(256)),
        ]
        for data in samples:
            with self.subTest(data=data[:16]):
                self.assertEqual(decode_original(escape_bytes(data)), data)


if __name__ == "__main__":
    unittest.main()
