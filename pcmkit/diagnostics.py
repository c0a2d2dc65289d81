"""One-time warnings for tolerated audio conditions."""

from __future__ import annotations

import logging
from typing import Any

from pcmkit.models import DiagnosticKind

logger = logging.getLogger(__name__)


class DiagnosticPolicy:
    """
    Rate limiter that lets each kind of diagnostic through once.

    Out-of-range reads, out-of-range writes and clipping are tolerated silently
    after their first occurrence. Buffers share ``default_policy`` unless given
    their own, so by default the first occurrence anywhere in the process
    silences later ones of the same kind.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        """
        Initialize the policy.

        Args:
            log: Logger receiving the warnings, defaults to this module's logger.
        """
        self._logger = log or logger
        self._fired: set[DiagnosticKind] = set()

    @property
    def fired(self) -> frozenset[DiagnosticKind]:
        """Kinds that have already been reported."""
        return frozenset(self._fired)

    def has_fired(self, kind: DiagnosticKind) -> bool:
        """Return whether ``kind`` has already been reported."""
        return kind in self._fired

    def warn_once(self, kind: DiagnosticKind, msg: str, *args: Any) -> bool:
        """
        Log ``msg`` at WARNING if ``kind`` has not been reported yet.

        Returns:
            True if the message was logged, False if it was suppressed.
        """
        if kind in self._fired:
            return False
        self._fired.add(kind)
        self._logger.warning(msg, *args)
        return True

    def reset(self, kind: DiagnosticKind | None = None) -> None:
        """Re-arm one kind, or every kind when ``kind`` is None."""
        if kind is None:
            self._fired.clear()
        else:
            self._fired.discard(kind)


default_policy = DiagnosticPolicy()
"""Policy shared by every buffer that is not given its own."""
