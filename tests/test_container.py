import io
import logging
import struct

import pytest
from conftest import WaveBytesFactory, chunk, pcm16

from pcmkit.buffer import WaveBuffer
from pcmkit.container import read_wave, write_wave
from pcmkit.container.writer import build_header
from pcmkit.errors import InvariantViolationError, MalformedContainerError, StreamIOError
from pcmkit.models import DataChunk, FormatDescriptor


class _FailingStream(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise OSError("device unplugged")

    def write(self, data: object) -> int:
        raise OSError("disk full")


def test_reads_fmt_and_data(wave_bytes: WaveBytesFactory) -> None:
    buffer = read_wave(io.BytesIO(wave_bytes(pcm16(1, 2, 3, 4))))
    assert buffer.format == FormatDescriptor.canonical()
    assert buffer.data.size == 8
    assert buffer.get(1) == (3, 4)


def test_skips_unknown_chunks(wave_bytes: WaveBytesFactory) -> None:
    data = wave_bytes(
        pcm16(7, 8),
        chunks_before=[chunk(b"LIST", b"INFOabcd")],
        chunks_between=[chunk(b"fact", b"\x01\x00\x00\x00"), chunk(b"junk", b"")],
    )
    buffer = read_wave(io.BytesIO(data))
    assert buffer.get(0) == (7, 8)


def test_data_before_fmt() -> None:
    fmt_body = FormatDescriptor.canonical().pack()
    body = b"WAVE" + chunk(b"data", pcm16(9, 10)) + chunk(b"fmt ", fmt_body)
    data = b"RIFF" + struct.pack("<I", len(body)) + body
    assert read_wave(io.BytesIO(data)).get(0) == (9, 10)


def test_stops_after_fmt_and_data(wave_bytes: WaveBytesFactory) -> None:
    data = wave_bytes(pcm16(1, 1), trailer=b"\xffgarbage that is not a chunk")
    stream = io.BytesIO(data)
    read_wave(stream)
    assert stream.tell() == data.index(b"\xffgarbage")


def test_total_size_is_not_enforced(wave_bytes: WaveBytesFactory) -> None:
    data = bytearray(wave_bytes(pcm16(1, 1)))
    data[4:8] = struct.pack("<I", 3)
    assert read_wave(io.BytesIO(bytes(data))).frame_count == 1


def test_fmt_extension_is_skipped_with_warning(
    wave_bytes: WaveBytesFactory, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="pcmkit.container.reader"):
        buffer = read_wave(io.BytesIO(wave_bytes(pcm16(4, 5), fmt_extension=b"\x00\x00")))
    assert buffer.format.chunk_size == 16
    assert buffer.get(0) == (4, 5)
    assert "fmt chunk declares 18 bytes, ignoring 2 extension bytes" in caplog.text


@pytest.mark.parametrize(
    ("data", "field"),
    [
        (b"RIFX\x00\x00\x00\x00WAVE", "RIFF"),
        (b"RIF", "RIFF"),
        (b"RIFF\x04\x00", "total size"),
        (b"RIFF\x04\x00\x00\x00WAVX", "WAVE"),
        (b"RIFF\x04\x00\x00\x00WAVE", "chunk tag"),
        (b"RIFF\x04\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00", "fmt "),
        (b"RIFF\x04\x00\x00\x00WAVEfmt \x08\x00\x00\x00", "fmt "),
        (b"RIFF\x04\x00\x00\x00WAVEdata\x08\x00\x00\x00\x01\x02", "data"),
        (b"RIFF\x04\x00\x00\x00WAVEdata\x08", "data chunk size"),
        (b"RIFF\x04\x00\x00\x00WAVELIST\x10\x00\x00\x00abc", "LIST"),
    ],
)
def test_malformed_container_names_failing_field(data: bytes, field: str) -> None:
    with pytest.raises(MalformedContainerError) as excinfo:
        read_wave(io.BytesIO(data))
    assert excinfo.value.field == field


def test_read_failure_is_stream_error() -> None:
    with pytest.raises(StreamIOError):
        read_wave(_FailingStream())


def test_header_layout() -> None:
    out = io.BytesIO()
    written = write_wave(WaveBuffer.silence(2), out)
    data = out.getvalue()
    assert written == len(data) == 44 + 8
    assert data[0:4] == b"RIFF"
    assert struct.unpack_from("<I", data, 4)[0] == 36 + 8
    assert data[8:16] == b"WAVEfmt "
    assert struct.unpack_from("<I", data, 16)[0] == 16
    assert struct.unpack_from("<HHIIHH", data, 20) == (1, 2, 44100, 176400, 4, 16)
    assert data[36:40] == b"data"
    assert struct.unpack_from("<I", data, 40)[0] == 8
    assert data[44:] == bytes(8)
    assert build_header(WaveBuffer.silence(2)) == data[:44]


def test_canonical_round_trip_is_byte_identical() -> None:
    original = WaveBuffer.from_samples([0, -1, 32767, -32768, 1234, -4321])
    first = io.BytesIO()
    write_wave(original, first)
    loaded = read_wave(io.BytesIO(first.getvalue()))
    assert loaded.format == original.format
    assert loaded.data.payload == original.data.payload
    second = io.BytesIO()
    write_wave(loaded, second)
    assert second.getvalue() == first.getvalue()


def test_non_canonical_save_warns_but_writes(caplog: pytest.LogCaptureFixture) -> None:
    fmt = FormatDescriptor.pcm(sample_rate=8000, channels=1, bits_per_sample=8)
    buffer = WaveBuffer(fmt, DataChunk.from_payload(b"\x80\x81"))
    out = io.BytesIO()
    with caplog.at_level(logging.WARNING, logger="pcmkit.container.writer"):
        write_wave(buffer, out)
    assert out.getvalue().endswith(b"data\x02\x00\x00\x00\x80\x81")
    assert "sanity check failed" in caplog.text


def test_strict_save_refuses_non_canonical() -> None:
    fmt = FormatDescriptor.pcm(sample_rate=8000, channels=1, bits_per_sample=8)
    buffer = WaveBuffer(fmt, DataChunk.from_payload(b"\x80\x81"))
    out = io.BytesIO()
    with pytest.raises(InvariantViolationError):
        write_wave(buffer, out, strict=True)
    assert out.getvalue() == b""


def test_write_failure_is_stream_error() -> None:
    with pytest.raises(StreamIOError):
        write_wave(WaveBuffer.silence(1), _FailingStream())
