"""Additive mixing of one buffer into another."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from pcmkit.models import SAMPLE_MAX, SAMPLE_MIN, DiagnosticKind

if TYPE_CHECKING:
    from pcmkit.buffer import WaveBuffer
    from pcmkit.diagnostics import DiagnosticPolicy

logger = logging.getLogger(__name__)


def mix(
    target: WaveBuffer,
    target_frame: int,
    source: WaveBuffer,
    source_frame: int,
    frames: int,
    *,
    volume: float = 1.0,
    fadeout: int = 0,
    diagnostics: DiagnosticPolicy | None = None,
) -> bool:
    """
    Add up to ``frames`` source frames into ``target``, in place.

    Mixing lines up both buffers at ``source_frame`` and
    ``target_frame`` and stops as soon as either buffer runs out or ``frames``
    frames have been added. The target is never resized and the source is only
    read.

    During the final ``fadeout`` frames of the window the source contribution is
    scaled by ``remaining / fadeout``, ramping it to silence. A ``volume`` other
    than 1.0 then scales the source sample, truncating towards zero. Sums are
    clamped to the signed 16-bit range.

    Args:
        target: Canonical buffer receiving the mix.
        target_frame: First target frame to mix into.
        source: Canonical buffer to mix from.
        source_frame: First source frame to read.
        frames: Maximum number of frames to mix.
        volume: Gain applied to the source.
        fadeout: Length of the closing fade-out ramp in frames.
        diagnostics: Policy for the one-time clipping warning, defaults to the
            target's policy.

    Returns:
        True if any sample was clamped.
    """
    if target_frame < 0 or source_frame < 0:
        raise ValueError("mix locations must not be negative")
    policy = diagnostics if diagnostics is not None else target.diagnostics

    available = min(target.frame_count - target_frame, source.frame_count - source_frame)
    count = max(0, min(frames, available))
    if count == 0:
        return False

    contribution = source.frames()[source_frame : source_frame + count].astype(np.int64)

    if fadeout > 0:
        remaining = frames - np.arange(count, dtype=np.int64)
        fading = remaining < fadeout
        if fading.any():
            ratio = (remaining[fading] / fadeout)[:, np.newaxis]
            contribution[fading] = (contribution[fading] * ratio).astype(np.int64)

    if volume != 1.0:
        contribution = (contribution * volume).astype(np.int64)

    window = target.frames()[target_frame : target_frame + count]
    total = window.astype(np.int64) + contribution
    mixed = np.clip(total, SAMPLE_MIN, SAMPLE_MAX)
    clipped = bool(np.any(mixed != total))
    window[:] = mixed.astype(window.dtype)

    logger.debug("Mixed %d frames at target frame %d", count, target_frame)
    if clipped:
        policy.warn_once(DiagnosticKind.CLIPPING, "Clipping occurred while mixing audio")
    return clipped
