"""Loading and saving buffers from files and streams."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from pcmkit.buffer import WaveBuffer
from pcmkit.container import read_wave, write_wave
from pcmkit.diagnostics import DiagnosticPolicy
from pcmkit.errors import StreamIOError
from pcmkit.normalize import normalize

logger = logging.getLogger(__name__)


def _open(path: str | Path, mode: str) -> BinaryIO:
    try:
        return open(path, mode)  # type: ignore[return-value]  # noqa: SIM115
    except OSError as err:
        action = "load" if "r" in mode else "create output file"
        raise StreamIOError(f"couldn't {action} {str(path)!r}: {err}") from err


def load_stream(
    stream: BinaryIO,
    *,
    source: str = "<stream>",
    diagnostics: DiagnosticPolicy | None = None,
) -> WaveBuffer:
    """Read a container from ``stream`` and normalize it to canonical form."""
    return normalize(read_wave(stream, diagnostics=diagnostics), source=source)


def load_raw(path: str | Path, *, diagnostics: DiagnosticPolicy | None = None) -> WaveBuffer:
    """Read the WAVE file at ``path`` without normalizing it."""
    with _open(path, "rb") as stream:
        return read_wave(stream, diagnostics=diagnostics)


def load(path: str | Path, *, diagnostics: DiagnosticPolicy | None = None) -> WaveBuffer:
    """
    Load and normalize the WAVE file at ``path``.

    Raises:
        StreamIOError: If the file cannot be opened or read.
        MalformedContainerError: If the file is not a valid container.
        UnsupportedFormatError: If the audio cannot be normalized.
    """
    with _open(path, "rb") as stream:
        return load_stream(stream, source=str(path), diagnostics=diagnostics)


def save(buffer: WaveBuffer, path: str | Path, *, strict: bool = False) -> int:
    """
    Write ``buffer`` to ``path`` as a WAVE file.

    In strict mode the buffer is checked before the file is created, so a
    rejected buffer leaves no file behind.

    Returns:
        Number of bytes written.

    Raises:
        StreamIOError: If the file cannot be created or written.
        InvariantViolationError: In strict mode, if the buffer is not canonical.
    """
    if strict:
        buffer.validate(canonical=True, context=f"refusing to save {path}")
    with _open(path, "wb") as stream:
        written = write_wave(buffer, stream, strict=strict)
    logger.debug("Wrote %d bytes to %s", written, path)
    return written
