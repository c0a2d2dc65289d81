"""RIFF/WAVE container reading and writing."""

from __future__ import annotations

__all__ = ["read_wave", "write_wave"]

from .reader import read_wave
from .writer import write_wave
