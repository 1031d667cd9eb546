"""Error definitions for the language bundle builder."""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises failures so the CLI can report them consistently."""

    FILE_IO = auto()
    INPUT_SHAPE = auto()
    FORMAT = auto()
    CAPACITY = auto()
    CONFIGURATION = auto()
    OTHER = auto()


class LangBundleError(Exception):
    """Base exception for all custom errors."""

    category = ErrorCategory.OTHER


class InputDecodeError(LangBundleError):
    """Raised when an input file is not valid text in its configured encoding."""

    category = ErrorCategory.FILE_IO


class InputShapeError(LangBundleError):
    """Raised when the original and translated inputs are not line-aligned."""

    category = ErrorCategory.INPUT_SHAPE


class LineFormatError(LangBundleError):
    """Raised when an input line cannot be parsed.

    The parsing helpers raise it without context; the line parser attaches
    the offending input line number and raw text before it propagates.
    """

    category = ErrorCategory.FORMAT

    def __init__(
        self,
        reason: str,
        *,
        line_number: Optional[int] = None,
        raw_text: Optional[str] = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.line_number = line_number
        self.raw_text = raw_text

    def locate(self, line_number: int, raw_text: str) -> "LineFormatError":
        self.line_number = line_number
        self.raw_text = raw_text
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.reason
        return f"Line {self.line_number}: {self.reason}: {self.raw_text!r}"


class TagFormatError(LineFormatError):
    """Raised when a bracketed script tag is malformed."""


class EscapeFormatError(LineFormatError):
    """Raised when an escape sequence or character cannot be converted to bytes."""


class CapacityError(LangBundleError):
    """Raised when a value does not fit the bundle's fixed-width fields."""

    category = ErrorCategory.CAPACITY


class BundleFormatError(LangBundleError):
    """Raised when a bundle file cannot be read back."""

    category = ErrorCategory.FORMAT


class OverwriteRefusedError(LangBundleError):
    """Raised when the output path would overwrite one of the inputs."""

    category = ErrorCategory.FILE_IO


class ConfigurationError(LangBundleError):
    """Raised when the configuration sources are invalid."""

    category = ErrorCategory.CONFIGURATION
