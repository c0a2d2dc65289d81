"""Exceptions raised by pcmkit."""

from __future__ import annotations

from collections.abc import Iterable


class PCMKitError(Exception):
    """Base class for all pcmkit errors."""


class StreamIOError(PCMKitError):
    """The underlying byte stream could not be read or written."""


class MalformedContainerError(PCMKitError):
    """The RIFF/WAVE container is damaged or truncated."""

    def __init__(self, field: str, message: str) -> None:
        """
        Initialize the error.

        Args:
            field: Magic, header field or chunk tag that failed to parse.
            message: Human readable description of the failure.
        """
        super().__init__(f"{field!r}: {message}")
        self.field = field


class UnsupportedFormatError(PCMKitError):
    """The audio uses a format pcmkit cannot normalize."""


class InvariantViolationError(UnsupportedFormatError):
    """A descriptor or payload breaks the PCM consistency rules."""

    def __init__(self, violations: Iterable[str], context: str = "") -> None:
        """
        Initialize the error.

        Args:
            violations: Descriptions of each broken rule.
            context: Optional prefix naming the operation that checked.
        """
        self.violations = list(violations)
        summary = "; ".join(self.violations)
        super().__init__(f"{context}: {summary}" if context else summary)
