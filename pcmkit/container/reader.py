"""Parse a RIFF/WAVE byte stream into a buffer."""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from pcmkit.buffer import WaveBuffer
from pcmkit.diagnostics import DiagnosticPolicy
from pcmkit.errors import MalformedContainerError, StreamIOError
from pcmkit.models import FMT_CHUNK_SIZE, ChunkTag, DataChunk, FormatDescriptor

logger = logging.getLogger(__name__)

_SKIP_BLOCK_SIZE = 64 * 1024


def _read_exact(stream: BinaryIO, size: int, field: str) -> bytes:
    """Read exactly ``size`` bytes or fail naming ``field``."""
    parts: list[bytes] = []
    remaining = size
    while remaining > 0:
        try:
            part = stream.read(remaining)
        except OSError as err:
            raise StreamIOError(f"couldn't read {field!r}: {err}") from err
        if not part:
            break
        parts.append(part)
        remaining -= len(part)
    data = b"".join(parts)
    if len(data) != size:
        raise MalformedContainerError(
            field, f"stream ended after {len(data)} of {size} bytes"
        )
    return data


def _read_u32(stream: BinaryIO, field: str) -> int:
    value: int = struct.unpack("<I", _read_exact(stream, 4, field))[0]
    return value


def _skip(stream: BinaryIO, size: int, field: str) -> None:
    """Discard exactly ``size`` bytes."""
    remaining = size
    while remaining > 0:
        block = min(remaining, _SKIP_BLOCK_SIZE)
        _read_exact(stream, block, field)
        remaining -= block


def _expect_magic(stream: BinaryIO, tag: ChunkTag) -> None:
    name = tag.value.decode("ascii")
    found = _read_exact(stream, 4, name)
    if found != tag.value:
        raise MalformedContainerError(name, f"expected magic {tag.value!r}, found {found!r}")


def _read_fmt(stream: BinaryIO) -> FormatDescriptor:
    size = _read_u32(stream, "fmt chunk size")
    if size < FMT_CHUNK_SIZE:
        raise MalformedContainerError(
            "fmt ", f"chunk declares {size} bytes, need at least {FMT_CHUNK_SIZE}"
        )
    descriptor = FormatDescriptor.unpack(_read_exact(stream, FMT_CHUNK_SIZE, "fmt "))
    if size > FMT_CHUNK_SIZE:
        logger.warning(
            "fmt chunk declares %d bytes, ignoring %d extension bytes",
            size,
            size - FMT_CHUNK_SIZE,
        )
        _skip(stream, size - FMT_CHUNK_SIZE, "fmt ")
    return descriptor


def _read_data(stream: BinaryIO) -> DataChunk:
    size = _read_u32(stream, "data chunk size")
    return DataChunk(size=size, payload=bytearray(_read_exact(stream, size, "data")))


def read_wave(
    stream: BinaryIO, *, diagnostics: DiagnosticPolicy | None = None
) -> WaveBuffer:
    """
    Read a RIFF/WAVE container from ``stream``.

    The total size field is read but not enforced. Chunks other than ``fmt ``
    and ``data`` are skipped by their declared length, and reading stops as
    soon as both of those have been seen. A ``fmt `` chunk longer than 16 bytes
    is accepted with a warning: its first 16 bytes are decoded and the rest is
    skipped, so the descriptor always reports the canonical chunk size. The
    result is returned as found in the stream; see
    :func:`pcmkit.normalize.normalize` for conversion to canonical form.

    Args:
        stream: Readable binary stream positioned at the ``RIFF`` magic.
        diagnostics: Policy handed to the returned buffer.

    Returns:
        The descriptor and payload wrapped in a buffer.

    Raises:
        MalformedContainerError: On a magic mismatch or a truncated field or chunk.
        StreamIOError: If the stream itself fails.
    """
    _expect_magic(stream, ChunkTag.RIFF)
    total_size = _read_u32(stream, "total size")
    _expect_magic(stream, ChunkTag.WAVE)
    logger.debug("RIFF container declares %d bytes", total_size)

    descriptor: FormatDescriptor | None = None
    data: DataChunk | None = None
    while descriptor is None or data is None:
        tag = _read_exact(stream, 4, "chunk tag")
        if tag == ChunkTag.FMT.value:
            descriptor = _read_fmt(stream)
        elif tag == ChunkTag.DATA.value:
            data = _read_data(stream)
        else:
            name = tag.decode("latin-1")
            size = _read_u32(stream, f"{name} chunk size")
            logger.debug("Skipping unknown chunk %r of %d bytes", name, size)
            _skip(stream, size, name)

    return WaveBuffer(descriptor, data, diagnostics=diagnostics)
