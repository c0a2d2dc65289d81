"""Shared pytest fixtures for pcmkit tests."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterable, Iterator

import pytest

from pcmkit.diagnostics import DiagnosticPolicy, default_policy

WaveBytesFactory = Callable[..., bytes]


def chunk(tag: bytes, body: bytes) -> bytes:
    """Return a tagged, length-prefixed chunk."""
    return tag + struct.pack("<I", len(body)) + body


def make_wave_bytes(
    payload: bytes,
    *,
    channels: int = 2,
    sample_rate: int = 44100,
    bits_per_sample: int = 16,
    audio_format: int = 1,
    byte_rate: int | None = None,
    block_align: int | None = None,
    fmt_extension: bytes = b"",
    chunks_before: Iterable[bytes] = (),
    chunks_between: Iterable[bytes] = (),
    trailer: bytes = b"",
) -> bytes:
    """Build a RIFF/WAVE file, optionally with extra chunks around fmt and data."""
    if block_align is None:
        block_align = channels * bits_per_sample // 8
    if byte_rate is None:
        byte_rate = sample_rate * block_align
    fmt_body = struct.pack(
        "<HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample
    )
    body = (
        b"WAVE"
        + b"".join(chunks_before)
        + chunk(b"fmt ", fmt_body + fmt_extension)
        + b"".join(chunks_between)
        + chunk(b"data", payload)
        + trailer
    )
    return b"RIFF" + struct.pack("<I", len(body)) + body


def pcm16(*samples: int) -> bytes:
    """Pack signed 16-bit samples little-endian."""
    return struct.pack(f"<{len(samples)}h", *samples)


@pytest.fixture
def wave_bytes() -> WaveBytesFactory:
    """Factory building WAVE file bytes."""
    return make_wave_bytes


@pytest.fixture
def policy() -> DiagnosticPolicy:
    """A diagnostic policy private to one test."""
    return DiagnosticPolicy()


@pytest.fixture(autouse=True)
def _reset_default_policy() -> Iterator[None]:
    """Keep one-time warnings from leaking between tests."""
    default_policy.reset()
    yield
    default_policy.reset()
