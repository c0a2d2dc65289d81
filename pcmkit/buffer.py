"""In-memory PCM buffer."""

from __future__ import annotations

import struct
from collections.abc import Sequence

import numpy as np

from pcmkit.diagnostics import DiagnosticPolicy, default_policy
from pcmkit.dsp import fader, mixer, resample
from pcmkit.errors import InvariantViolationError
from pcmkit.models import (
    CANONICAL_BLOCK_ALIGN,
    BufferInfo,
    DataChunk,
    DiagnosticKind,
    FormatDescriptor,
)

SAMPLE_DTYPE = np.dtype("<i2")

# One canonical frame (little-endian): left(2) + right(2)
FRAME_FORMAT = "<hh"
RAW_FRAME_FORMAT = "<HH"


class WaveBuffer:
    """
    A format descriptor plus the PCM payload it describes.

    Buffers loaded from a container may hold any supported format until they are
    normalized; sample access and the DSP operations assume canonical form
    (16-bit signed little-endian stereo at 44100 Hz, 4 bytes per frame).
    Operations that change the format or the frame count return a new buffer;
    ``set``, ``add`` and the fades mutate the payload in place.
    """

    __slots__ = ("_data", "_format", "diagnostics")

    def __init__(
        self,
        fmt: FormatDescriptor,
        data: DataChunk,
        *,
        diagnostics: DiagnosticPolicy | None = None,
    ) -> None:
        """
        Initialize the buffer.

        Args:
            fmt: Format descriptor of the payload.
            data: Data chunk, owned by this buffer from now on.
            diagnostics: Policy for one-time warnings, defaults to the shared policy.
        """
        self._format = fmt
        self._data = data
        self.diagnostics = diagnostics if diagnostics is not None else default_policy

    @classmethod
    def silence(cls, frames: int, *, diagnostics: DiagnosticPolicy | None = None) -> WaveBuffer:
        """Return a canonical buffer of ``frames`` silent frames."""
        if frames < 0:
            raise ValueError("frames must not be negative")
        data = DataChunk.from_payload(bytes(frames * CANONICAL_BLOCK_ALIGN))
        return cls(FormatDescriptor.canonical(), data, diagnostics=diagnostics)

    @classmethod
    def from_samples(
        cls, samples: Sequence[int], *, diagnostics: DiagnosticPolicy | None = None
    ) -> WaveBuffer:
        """Return a canonical buffer holding interleaved left/right ``samples``."""
        if len(samples) % 2:
            raise ValueError("interleaved stereo samples must come in pairs")
        payload = np.asarray(samples, dtype=SAMPLE_DTYPE).tobytes()
        return cls(
            FormatDescriptor.canonical(), DataChunk.from_payload(payload), diagnostics=diagnostics
        )

    @property
    def format(self) -> FormatDescriptor:
        """Format descriptor of the payload."""
        return self._format

    @property
    def data(self) -> DataChunk:
        """Data chunk holding the payload."""
        return self._data

    @property
    def frame_count(self) -> int:
        """Number of whole frames in the payload."""
        if self._format.block_align == 0:
            return 0
        return self._data.size // self._format.block_align

    @property
    def duration_seconds(self) -> float:
        """Playback length in seconds."""
        if self._format.sample_rate == 0:
            return 0.0
        return self.frame_count / self._format.sample_rate

    @property
    def is_canonical(self) -> bool:
        """Whether the buffer is in 16-bit stereo 44100 Hz PCM form."""
        return not self.violations(canonical=True)

    def violations(self, *, canonical: bool = True) -> list[str]:
        """Return every consistency (and optionally canonical) rule the buffer breaks."""
        fmt_problems = (
            self._format.canonical_violations() if canonical else self._format.violations()
        )
        return fmt_problems + self._data.violations()

    def validate(self, *, canonical: bool = True, context: str = "") -> None:
        """
        Check the buffer's invariants.

        Raises:
            InvariantViolationError: If any rule is broken.
        """
        problems = self.violations(canonical=canonical)
        if problems:
            raise InvariantViolationError(problems, context)

    def info(self) -> BufferInfo:
        """Summarize the buffer."""
        fmt = self._format
        return BufferInfo(
            audio_format=fmt.audio_format,
            channels=fmt.channels,
            sample_rate=fmt.sample_rate,
            byte_rate=fmt.byte_rate,
            block_align=fmt.block_align,
            bits_per_sample=fmt.bits_per_sample,
            data_size=self._data.size,
            frame_count=self.frame_count,
            duration_seconds=self.duration_seconds,
            canonical=self.is_canonical,
        )

    def copy(self) -> WaveBuffer:
        """Return an independent buffer with the same format and payload."""
        return WaveBuffer(
            self._format,
            DataChunk(size=self._data.size, payload=bytearray(self._data.payload)),
            diagnostics=self.diagnostics,
        )

    def replaced(self, fmt: FormatDescriptor, payload: bytes | bytearray) -> WaveBuffer:
        """Return a new buffer with ``fmt`` and ``payload``, sharing this buffer's policy."""
        return WaveBuffer(fmt, DataChunk.from_payload(payload), diagnostics=self.diagnostics)

    def frames(self) -> np.ndarray:
        """
        Return a writable (frames, 2) view of the whole canonical frames.

        Writes through the view change the payload in place.
        """
        count = len(self._data.payload) // CANONICAL_BLOCK_ALIGN
        if count == 0:
            return np.zeros((0, 2), dtype=SAMPLE_DTYPE)
        return np.frombuffer(self._data.payload, dtype=SAMPLE_DTYPE, count=count * 2).reshape(
            -1, 2
        )

    def samples(self) -> list[int]:
        """Return every signed 16-bit sample, interleaved."""
        count = len(self._data.payload) // 2
        if count == 0:
            return []
        values: list[int] = np.frombuffer(
            self._data.payload, dtype=SAMPLE_DTYPE, count=count
        ).tolist()
        return values

    def get(self, frame: int) -> tuple[int, int]:
        """
        Return the (left, right) samples of ``frame``.

        Reading past the end returns silence and is reported once per policy.
        """
        if frame < 0 or frame >= self._data.size // CANONICAL_BLOCK_ALIGN:
            self.diagnostics.warn_once(
                DiagnosticKind.OUT_OF_RANGE_READ,
                "Read of frame %d outside buffer of %d frames; returning silence",
                frame,
                self._data.size // CANONICAL_BLOCK_ALIGN,
            )
            return 0, 0
        left, right = struct.unpack_from(FRAME_FORMAT, self._data.payload, frame * 4)
        return left, right

    def set(self, frame: int, left: int, right: int) -> None:
        """
        Store the (left, right) samples of ``frame``.

        Only the low 16 bits of each value are kept. Writing past the end is
        ignored and reported once per policy.
        """
        if frame < 0 or frame >= self._data.size // CANONICAL_BLOCK_ALIGN:
            self.diagnostics.warn_once(
                DiagnosticKind.OUT_OF_RANGE_WRITE,
                "Write to frame %d outside buffer of %d frames ignored",
                frame,
                self._data.size // CANONICAL_BLOCK_ALIGN,
            )
            return
        struct.pack_into(
            RAW_FRAME_FORMAT, self._data.payload, frame * 4, left & 0xFFFF, right & 0xFFFF
        )

    def stretched(self, frames: int) -> WaveBuffer:
        """Return a new buffer retargeted to exactly ``frames`` frames."""
        return resample.stretched(self, frames)

    def stretched_relative(self, multiplier: float) -> WaveBuffer:
        """Return a new buffer whose length is scaled by ``multiplier``."""
        return resample.stretched_relative(self, multiplier)

    def add(
        self,
        target_frame: int,
        source: WaveBuffer,
        source_frame: int,
        frames: int,
        volume: float = 1.0,
        fadeout: int = 0,
    ) -> bool:
        """Mix ``source`` into this buffer in place; return whether anything clipped."""
        return mixer.mix(
            self,
            target_frame,
            source,
            source_frame,
            frames,
            volume=volume,
            fadeout=fadeout,
        )

    def fade_samples(self, frames: int) -> None:
        """Ramp the final ``frames`` frames to silence in place."""
        fader.fade_samples(self, frames)

    def fade_fraction(self, fraction: float) -> None:
        """Ramp the final ``fraction`` of the buffer to silence in place."""
        fader.fade_fraction(self, fraction)

    def __repr__(self) -> str:
        """Return a short description of the buffer."""
        fmt = self._format
        return (
            f"WaveBuffer({fmt.channels}ch, {fmt.bits_per_sample}-bit, {fmt.sample_rate} Hz, "
            f"{self.frame_count} frames)"
        )
