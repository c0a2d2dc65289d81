import logging

import pytest

from pcmkit.buffer import WaveBuffer
from pcmkit.diagnostics import DiagnosticPolicy, default_policy
from pcmkit.models import DiagnosticKind


def test_warn_once_per_kind(caplog: pytest.LogCaptureFixture) -> None:
    policy = DiagnosticPolicy()
    with caplog.at_level(logging.WARNING, logger="pcmkit.diagnostics"):
        assert policy.warn_once(DiagnosticKind.CLIPPING, "clipped %d", 1)
        assert not policy.warn_once(DiagnosticKind.CLIPPING, "clipped %d", 2)
        assert policy.warn_once(DiagnosticKind.OUT_OF_RANGE_READ, "read")
    assert [record.getMessage() for record in caplog.records] == ["clipped 1", "read"]
    assert policy.fired == {DiagnosticKind.CLIPPING, DiagnosticKind.OUT_OF_RANGE_READ}


def test_reset_rearms_kinds() -> None:
    policy = DiagnosticPolicy()
    policy.warn_once(DiagnosticKind.CLIPPING, "clipped")
    policy.warn_once(DiagnosticKind.OUT_OF_RANGE_WRITE, "write")
    policy.reset(DiagnosticKind.CLIPPING)
    assert not policy.has_fired(DiagnosticKind.CLIPPING)
    assert policy.has_fired(DiagnosticKind.OUT_OF_RANGE_WRITE)
    policy.reset()
    assert policy.fired == frozenset()


def test_custom_logger_receives_warnings(caplog: pytest.LogCaptureFixture) -> None:
    policy = DiagnosticPolicy(logging.getLogger("tests.audio"))
    with caplog.at_level(logging.WARNING, logger="tests.audio"):
        policy.warn_once(DiagnosticKind.CLIPPING, "clipped")
    assert caplog.records[0].name == "tests.audio"


def test_buffers_share_default_policy() -> None:
    first = WaveBuffer.silence(1)
    second = WaveBuffer.silence(1)
    assert first.diagnostics is default_policy
    first.get(5)
    assert second.diagnostics.has_fired(DiagnosticKind.OUT_OF_RANGE_READ)


def test_injected_policy_is_isolated(policy: DiagnosticPolicy) -> None:
    buffer = WaveBuffer.silence(1, diagnostics=policy)
    buffer.get(5)
    assert policy.has_fired(DiagnosticKind.OUT_OF_RANGE_READ)
    assert not default_policy.has_fired(DiagnosticKind.OUT_OF_RANGE_READ)
