"""Serialize a buffer as a RIFF/WAVE byte stream."""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, BinaryIO

from pcmkit.errors import StreamIOError
from pcmkit.models import CHUNK_HEADER_FORMAT, RIFF_HEADER_SIZE, ChunkTag

if TYPE_CHECKING:
    from pcmkit.buffer import WaveBuffer

logger = logging.getLogger(__name__)


def build_header(buffer: WaveBuffer) -> bytes:
    """Return the 44 bytes that precede the payload."""
    fmt = buffer.format
    data_size = buffer.data.size
    return b"".join(
        (
            struct.pack(
                CHUNK_HEADER_FORMAT, ChunkTag.RIFF.value, RIFF_HEADER_SIZE + data_size
            ),
            ChunkTag.WAVE.value,
            struct.pack(CHUNK_HEADER_FORMAT, ChunkTag.FMT.value, fmt.chunk_size),
            fmt.pack(),
            struct.pack(CHUNK_HEADER_FORMAT, ChunkTag.DATA.value, data_size),
        )
    )


def write_wave(buffer: WaveBuffer, stream: BinaryIO, *, strict: bool = False) -> int:
    """
    Write ``buffer`` to ``stream`` as a RIFF/WAVE container.

    The layout is fixed: ``RIFF``, ``WAVE``, a 16-byte ``fmt `` chunk and the
    ``data`` chunk, all little-endian without padding. Canonical invariants are
    checked after writing and a violation is only logged, unless ``strict`` is
    set, in which case the check runs first and nothing is written on failure.

    Args:
        buffer: Buffer to serialize.
        stream: Writable binary stream.
        strict: Refuse to write a buffer that is not canonical.

    Returns:
        Number of bytes written.

    Raises:
        InvariantViolationError: In strict mode, if the buffer is not canonical.
        StreamIOError: If the stream itself fails.
    """
    if strict:
        buffer.validate(canonical=True, context="refusing to save")

    header = build_header(buffer)
    payload = buffer.data.payload
    try:
        stream.write(header)
        stream.write(payload)
    except OSError as err:
        raise StreamIOError(f"couldn't write WAVE data: {err}") from err

    problems = buffer.violations(canonical=True)
    if problems:
        logger.warning("While saving, sanity check failed: %s", "; ".join(problems))
    return len(header) + len(payload)
