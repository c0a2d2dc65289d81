"""Tail fades to silence."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from pcmkit.buffer import WaveBuffer


def fade_samples(buffer: WaveBuffer, frames: int) -> None:
    """
    Ramp the final ``frames`` frames of ``buffer`` to silence, in place.

    Frame ``k`` is scaled by ``(frame_count - k) / frames`` for ``k`` from the
    last frame down to ``frame_count - frames + 1``; frame
    ``frame_count - frames`` keeps its full level. Scaled samples are truncated
    towards zero. Does nothing for a non-positive ``frames`` or a buffer of
    fewer than two frames.
    """
    count = buffer.frame_count
    if frames <= 0 or count < 2:
        return
    frames = min(frames, count)

    k = np.arange(count - frames + 1, count)
    if k.size == 0:
        return
    multiplier = ((count - k) / frames)[:, np.newaxis]
    view = buffer.frames()
    view[k] = (view[k] * multiplier).astype(np.int64).astype(view.dtype)


def fade_fraction(buffer: WaveBuffer, fraction: float) -> None:
    """Fade the final ``fraction`` (clamped to [0, 1]) of ``buffer``."""
    fraction = min(max(fraction, 0.0), 1.0)
    fade_samples(buffer, math.floor(buffer.frame_count * fraction))
