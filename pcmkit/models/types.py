"""Models for enum types used by pcmkit."""

from enum import Enum


class ChunkTag(Enum):
    """Four-byte tags recognised in a RIFF/WAVE container."""

    RIFF = b"RIFF"
    """Outer container magic."""
    WAVE = b"WAVE"
    """Form type following the total size field."""
    FMT = b"fmt "
    """Format descriptor chunk."""
    DATA = b"data"
    """PCM payload chunk."""


class DiagnosticKind(Enum):
    """Kinds of non-fatal conditions reported at most once per policy."""

    OUT_OF_RANGE_READ = "out_of_range_read"
    """A frame past the end of a buffer was read."""
    OUT_OF_RANGE_WRITE = "out_of_range_write"
    """A frame past the end of a buffer was written."""
    CLIPPING = "clipping"
    """A mixed sample exceeded the signed 16-bit range and was clamped."""
