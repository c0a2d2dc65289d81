"""Models for PCM buffers and the RIFF/WAVE container."""

from __future__ import annotations

__all__ = [
    "CANONICAL_BITS_PER_SAMPLE",
    "CANONICAL_BLOCK_ALIGN",
    "CANONICAL_CHANNELS",
    "CANONICAL_SAMPLE_RATE",
    "CHUNK_HEADER_FORMAT",
    "CHUNK_HEADER_SIZE",
    "FMT_BODY_FORMAT",
    "FMT_CHUNK_SIZE",
    "PCM_FORMAT_TAG",
    "RIFF_HEADER_SIZE",
    "SAMPLE_MAX",
    "SAMPLE_MIN",
    "BufferInfo",
    "ChunkTag",
    "DataChunk",
    "DiagnosticKind",
    "FormatDescriptor",
    "types",
]
import struct
from dataclasses import dataclass

from mashumaro.mixins.orjson import DataClassORJSONMixin

from . import types
from .types import ChunkTag, DiagnosticKind

PCM_FORMAT_TAG = 1
FMT_CHUNK_SIZE = 16

CANONICAL_SAMPLE_RATE = 44100
CANONICAL_CHANNELS = 2
CANONICAL_BITS_PER_SAMPLE = 16
CANONICAL_BLOCK_ALIGN = CANONICAL_CHANNELS * CANONICAL_BITS_PER_SAMPLE // 8

SAMPLE_MIN = -32768
SAMPLE_MAX = 32767

# fmt body (little-endian): format(2) + channels(2) + rate(4) + byte rate(4)
# + block align(2) + bits per sample(2) = 16 bytes
FMT_BODY_FORMAT = "<HHIIHH"

# Chunk header (little-endian): tag(4) + length(4) = 8 bytes
CHUNK_HEADER_FORMAT = "<4sI"
CHUNK_HEADER_SIZE = struct.calcsize(CHUNK_HEADER_FORMAT)

# Size of everything before the data payload in a written file, minus the
# 8 bytes of the RIFF tag and size field
RIFF_HEADER_SIZE = 36


@dataclass(frozen=True)
class FormatDescriptor(DataClassORJSONMixin):
    """Contents of a ``fmt `` chunk."""

    audio_format: int
    """Format tag (1 = PCM)."""
    channels: int
    """Number of interleaved channels."""
    sample_rate: int
    """Frames per second."""
    byte_rate: int
    """Bytes per second (sample_rate * channels * bits_per_sample / 8)."""
    block_align: int
    """Bytes per frame (channels * bits_per_sample / 8)."""
    bits_per_sample: int
    """Bits per single-channel sample."""
    chunk_size: int = FMT_CHUNK_SIZE
    """Declared size of the fmt chunk body."""

    @classmethod
    def pcm(cls, *, sample_rate: int, channels: int, bits_per_sample: int) -> FormatDescriptor:
        """Build a consistent PCM descriptor from its three free parameters."""
        block_align = channels * bits_per_sample // 8
        return cls(
            audio_format=PCM_FORMAT_TAG,
            channels=channels,
            sample_rate=sample_rate,
            byte_rate=sample_rate * block_align,
            block_align=block_align,
            bits_per_sample=bits_per_sample,
        )

    @classmethod
    def canonical(cls) -> FormatDescriptor:
        """Return the 16-bit stereo 44100 Hz descriptor."""
        return cls.pcm(
            sample_rate=CANONICAL_SAMPLE_RATE,
            channels=CANONICAL_CHANNELS,
            bits_per_sample=CANONICAL_BITS_PER_SAMPLE,
        )

    def pack(self) -> bytes:
        """Pack the 16-byte descriptor body in container field order."""
        return struct.pack(
            FMT_BODY_FORMAT,
            self.audio_format,
            self.channels,
            self.sample_rate,
            self.byte_rate,
            self.block_align,
            self.bits_per_sample,
        )

    @classmethod
    def unpack(cls, body: bytes) -> FormatDescriptor:
        """Unpack a 16-byte descriptor body."""
        audio_format, channels, sample_rate, byte_rate, block_align, bits = struct.unpack(
            FMT_BODY_FORMAT, body
        )
        return cls(
            audio_format=audio_format,
            channels=channels,
            sample_rate=sample_rate,
            byte_rate=byte_rate,
            block_align=block_align,
            bits_per_sample=bits,
        )

    def violations(self) -> list[str]:
        """Return the structural rules this descriptor breaks."""
        problems: list[str] = []
        if self.chunk_size != FMT_CHUNK_SIZE:
            problems.append(f"fmt chunk size {self.chunk_size} != {FMT_CHUNK_SIZE}")
        if self.audio_format != PCM_FORMAT_TAG:
            problems.append(f"audio format {self.audio_format} != {PCM_FORMAT_TAG} (PCM)")
        if self.channels > 2:
            problems.append(f"channel count {self.channels} > 2")
        expected_byte_rate = self.sample_rate * self.channels * self.bits_per_sample // 8
        if self.byte_rate != expected_byte_rate:
            problems.append(
                f"byte rate {self.byte_rate} does not match other fmt fields "
                f"(expected {expected_byte_rate})"
            )
        expected_block_align = self.channels * self.bits_per_sample // 8
        if self.block_align != expected_block_align:
            problems.append(
                f"block align {self.block_align} does not match other fmt fields "
                f"(expected {expected_block_align})"
            )
        return problems

    def canonical_violations(self) -> list[str]:
        """Return the canonical-form rules this descriptor breaks."""
        problems = self.violations()
        if self.bits_per_sample != CANONICAL_BITS_PER_SAMPLE:
            problems.append(f"bits per sample {self.bits_per_sample} != 16")
        if self.channels != CANONICAL_CHANNELS:
            problems.append(f"channel count {self.channels} != 2")
        if self.sample_rate != CANONICAL_SAMPLE_RATE:
            problems.append(f"sample rate {self.sample_rate} != {CANONICAL_SAMPLE_RATE}")
        return problems


@dataclass
class DataChunk:
    """Declared size plus raw little-endian PCM payload of a ``data`` chunk."""

    size: int
    """Declared payload length in bytes."""
    payload: bytearray
    """Interleaved little-endian samples."""

    @classmethod
    def from_payload(cls, payload: bytes | bytearray) -> DataChunk:
        """Wrap a payload, taking ownership of a fresh copy."""
        return cls(size=len(payload), payload=bytearray(payload))

    def violations(self) -> list[str]:
        """Return the consistency rules this chunk breaks."""
        if self.size != len(self.payload):
            return [
                f"data chunk size {self.size} did not match amount of data ({len(self.payload)})"
            ]
        return []


@dataclass
class BufferInfo(DataClassORJSONMixin):
    """Summary of a buffer, suitable for JSON output."""

    audio_format: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int
    frame_count: int
    duration_seconds: float
    canonical: bool
