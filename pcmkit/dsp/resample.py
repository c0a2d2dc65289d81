"""Frame-count retargeting by linear interpolation."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from pcmkit.models import CANONICAL_CHANNELS, FormatDescriptor

if TYPE_CHECKING:
    from pcmkit.buffer import WaveBuffer


def stretched(buffer: WaveBuffer, frames: int) -> WaveBuffer:
    """
    Return a new canonical buffer of exactly ``frames`` frames.

    Destination frame ``n`` samples the source at position
    ``n / (frames - 1) * (source_frames - 1)``, interpolating linearly between
    the two neighbouring source frames and truncating towards zero. The last
    destination frame is a copy of the last source frame.

    This is the single resampling primitive used both for duration changes and
    for sample-rate conversion; it is not band-limited.

    Args:
        buffer: Canonical source buffer, left untouched.
        frames: Frame count of the result.

    Returns:
        A new buffer; a plain copy when ``frames`` equals the source frame count.

    Raises:
        ValueError: If ``frames`` is negative.
    """
    if frames < 0:
        raise ValueError("frames must not be negative")
    source_frames = buffer.frame_count
    if frames == source_frames:
        return buffer.copy()
    if frames == 0:
        return buffer.replaced(FormatDescriptor.canonical(), b"")

    out = np.zeros((frames, CANONICAL_CHANNELS), dtype="<i2")
    # An empty source stretches into silence
    if source_frames > 0:
        src = buffer.frames()[:source_frames].astype(np.float64)
        last = source_frames - 1
        out[-1] = src[last]
        span = frames - 1
        if span > 0:
            position = np.arange(span, dtype=np.float64) / span * last
            i = position.astype(np.int64)
            j = np.minimum(i + 1, last)
            frac = (position - i)[:, np.newaxis]
            out[:span] = (src[i] + (src[j] - src[i]) * frac).astype(np.int64)

    return buffer.replaced(FormatDescriptor.canonical(), out.tobytes())


def stretched_relative(buffer: WaveBuffer, multiplier: float) -> WaveBuffer:
    """Return a new buffer of ``floor(frame_count * multiplier)`` frames."""
    if not math.isfinite(multiplier):
        raise ValueError(f"multiplier must be finite, got {multiplier}")
    if multiplier < 0:
        raise ValueError("multiplier must not be negative")
    return stretched(buffer, math.floor(buffer.frame_count * multiplier))
