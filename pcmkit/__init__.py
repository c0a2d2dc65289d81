"""pcmkit: in-memory PCM audio buffers with RIFF/WAVE I/O."""

from __future__ import annotations

from pcmkit.buffer import WaveBuffer
from pcmkit.container import read_wave, write_wave
from pcmkit.diagnostics import DiagnosticPolicy, default_policy
from pcmkit.errors import (
    InvariantViolationError,
    MalformedContainerError,
    PCMKitError,
    StreamIOError,
    UnsupportedFormatError,
)
from pcmkit.files import load, load_raw, load_stream, save
from pcmkit.models import BufferInfo, DataChunk, DiagnosticKind, FormatDescriptor
from pcmkit.normalize import normalize

__all__ = [
    "BufferInfo",
    "DataChunk",
    "DiagnosticKind",
    "DiagnosticPolicy",
    "FormatDescriptor",
    "InvariantViolationError",
    "MalformedContainerError",
    "PCMKitError",
    "StreamIOError",
    "UnsupportedFormatError",
    "WaveBuffer",
    "default_policy",
    "load",
    "load_raw",
    "load_stream",
    "normalize",
    "read_wave",
    "save",
    "write_wave",
]
