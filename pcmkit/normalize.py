"""Conversion of loaded buffers to canonical form."""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from pcmkit.buffer import WaveBuffer
from pcmkit.dsp.resample import stretched
from pcmkit.errors import UnsupportedFormatError
from pcmkit.models import (
    CANONICAL_BITS_PER_SAMPLE,
    CANONICAL_CHANNELS,
    CANONICAL_SAMPLE_RATE,
    PCM_FORMAT_TAG,
)

logger = logging.getLogger(__name__)

SUPPORTED_BITS_PER_SAMPLE = (8, 16)
SUPPORTED_CHANNELS = (1, 2)


def check_supported(buffer: WaveBuffer, *, source: str = "<stream>") -> None:
    """
    Reject buffers that cannot be normalized.

    Raises:
        UnsupportedFormatError: For a non-PCM format, more than two channels, a bit
            depth other than 8 or 16, or a sample rate of 0.
        InvariantViolationError: If the descriptor or payload is inconsistent.
    """
    fmt = buffer.format
    if fmt.audio_format != PCM_FORMAT_TAG:
        raise UnsupportedFormatError(
            f"{source}: audio format {fmt.audio_format} is not PCM ({PCM_FORMAT_TAG})"
        )
    if fmt.channels not in SUPPORTED_CHANNELS:
        raise UnsupportedFormatError(f"{source}: {fmt.channels} channels is not 1 or 2")
    if fmt.bits_per_sample not in SUPPORTED_BITS_PER_SAMPLE:
        raise UnsupportedFormatError(
            f"{source}: bits per sample was {fmt.bits_per_sample}, not 8 or 16"
        )
    if fmt.sample_rate == 0:
        raise UnsupportedFormatError(f"{source}: sample rate is 0")
    buffer.validate(canonical=False, context=source)


def whole_frames(buffer: WaveBuffer, *, source: str = "<stream>") -> WaveBuffer:
    """Drop a trailing partial frame, if any."""
    usable = buffer.frame_count * buffer.format.block_align
    if usable == buffer.data.size:
        return buffer
    logger.warning(
        "Dropping %d trailing bytes of partial frame from %s", buffer.data.size - usable, source
    )
    return buffer.replaced(buffer.format, buffer.data.payload[:usable])


def to_16_bit(buffer: WaveBuffer, *, source: str = "<stream>") -> WaveBuffer:
    """
    Widen unsigned 8-bit samples to signed 16-bit.

    Each byte ``old`` becomes ``(old - 128) * 256 + old``, so the full 8-bit
    range maps onto exactly -32768..32767.
    """
    fmt = buffer.format
    if fmt.bits_per_sample == CANONICAL_BITS_PER_SAMPLE:
        return buffer
    if fmt.bits_per_sample != 8:
        raise UnsupportedFormatError(
            f"{source}: bits per sample was {fmt.bits_per_sample}, not 8 or 16"
        )

    logger.info("Converting %s to 16 bit", source)
    src = buffer.data.payload
    old = np.frombuffer(src, dtype=np.uint8).astype(np.int32)
    payload = ((old - 128) * 256 + old).astype("<i2").tobytes()
    new_format = replace(
        fmt,
        bits_per_sample=CANONICAL_BITS_PER_SAMPLE,
        byte_rate=fmt.byte_rate * 2,
        block_align=fmt.block_align * 2,
    )
    return buffer.replaced(new_format, payload)


def to_stereo(buffer: WaveBuffer, *, source: str = "<stream>") -> WaveBuffer:
    """Duplicate every 16-bit mono sample into the left and right channels."""
    fmt = buffer.format
    if fmt.channels != 1:
        return buffer

    logger.info("Converting %s to stereo", source)
    src = buffer.data.payload
    mono = np.frombuffer(src, dtype="<i2", count=len(src) // 2)
    payload = np.repeat(mono, CANONICAL_CHANNELS).tobytes()
    new_format = replace(
        fmt,
        channels=CANONICAL_CHANNELS,
        byte_rate=fmt.byte_rate * 2,
        block_align=fmt.block_align * 2,
    )
    return buffer.replaced(new_format, payload)


def to_sample_rate(buffer: WaveBuffer, *, source: str = "<stream>") -> WaveBuffer:
    """Resample a 16-bit stereo buffer to 44100 Hz."""
    fmt = buffer.format
    if fmt.sample_rate == CANONICAL_SAMPLE_RATE:
        return buffer

    frames = buffer.frame_count * CANONICAL_SAMPLE_RATE // fmt.sample_rate
    logger.info(
        "Resampling %s from %d Hz to %d Hz (%d -> %d frames)",
        source,
        fmt.sample_rate,
        CANONICAL_SAMPLE_RATE,
        buffer.frame_count,
        frames,
    )
    resampled = stretched(buffer, frames)
    new_format = replace(
        fmt,
        sample_rate=CANONICAL_SAMPLE_RATE,
        byte_rate=CANONICAL_SAMPLE_RATE * fmt.block_align,
    )
    return buffer.replaced(new_format, resampled.data.payload)


def normalize(buffer: WaveBuffer, *, source: str = "<stream>") -> WaveBuffer:
    """
    Convert a freshly read buffer to canonical 16-bit stereo 44100 Hz form.

    The bit depth, channel and sample rate passes each run only when needed,
    in that order, and each returns a new buffer. A buffer that is already
    canonical is returned unchanged.

    Args:
        buffer: Buffer as produced by :func:`pcmkit.container.read_wave`.
        source: Name of the input, used in log and error messages.

    Returns:
        A canonical buffer.

    Raises:
        UnsupportedFormatError: If the input format cannot be converted.
        InvariantViolationError: If the input is inconsistent, or if the result
            is somehow not canonical.
    """
    check_supported(buffer, source=source)
    result = whole_frames(buffer, source=source)
    result = to_16_bit(result, source=source)
    result = to_stereo(result, source=source)
    result = to_sample_rate(result, source=source)
    result.validate(canonical=True, context=f"normalizing {source} seemed to succeed, but")
    return result
