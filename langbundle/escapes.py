"""Conversion between the escaped text form of script strings and raw bytes.

Script dumps write raw engine bytes as text: a doubled backslash stands for
a literal ``\\`` byte and ``\\DDD`` (three decimal digits) for any byte value.
Every other character maps to bytes through the side's text encoding.
"""

from __future__ import annotations

from typing import Callable

from .errors import EscapeFormatError

CharEncoder = Callable[[str], bytes]

BACKSLASH = "\\"


def decode_escapes(text: str, encode_char: CharEncoder) -> bytes:
    """Decode escaped ``text`` into bytes, encoding plain characters with ``encode_char``."""

    result = bytearray()
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != BACKSLASH:
            result += encode_char(char)
            index += 1
            continue

        if text[index + 1:index + 2] == BACKSLASH:
            result.append(0x5C)
            index += 2
            continue

        digits = text[index + 1:index + 4]
        if len(digits) != 3 or not (digits.isascii() and digits.isdigit()):
            raise EscapeFormatError(
                f"Malformed escape sequence {text[index:index + 4]!r} at column {index + 1}"
            )
        value = int(digits)
        if value > 0xFF:
            raise EscapeFormatError(
                f"Escaped byte value {value} out of range at column {index + 1}"
            )
        result.append(value)
        index += 4
    return bytes(result)


def _encode_raw_byte(char: str) -> bytes:
    code = ord(char)
    if code > 0xFF:
        raise EscapeFormatError(
            f"Character {char!r} (U+{code:04X}) does not fit in a single byte"
        )
    return bytes((code,))


def decode_original(text: str) -> bytes:
    """Decode an original-language string; each character is one raw byte."""

    return decode_escapes(text, _encode_raw_byte)


def decode_translated(text: str, encoding: str) -> bytes:
    """Decode a translated string, encoding plain characters with ``encoding``."""

    def encode_char(char: str) -> bytes:
        try:
            return char.encode(encoding)
        except UnicodeEncodeError as exc:
            raise EscapeFormatError(
                f"Character {char!r} cannot be encoded as {encoding}"
            ) from exc

    return decode_escapes(text, encode_char)


def escape_bytes(data: bytes) -> str:
    """Render raw engine bytes in the escaped text form read by :func:`decode_original`."""

    parts = []
    for value in data:
        if value == 0x5C:
            parts.append(BACKSLASH * 2)
        elif 0x20 <= value < 0x7F:
            parts.append(chr(value))
        else:
            parts.append(f"{BACKSLASH}{value:03d}")
    return "".join(parts)
