"""Sample-accurate operations over canonical buffers."""

from __future__ import annotations

__all__ = ["fade_fraction", "fade_samples", "mix", "stretched", "stretched_relative"]

from .fader import fade_fraction, fade_samples
from .mixer import mix
from .resample import stretched, stretched_relative
