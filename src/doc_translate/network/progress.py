# SPDX-License-Identifier: Apache-2.0
"""Progress callback protocol for network requests."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

SENT = 0.1
HEADERS_RECEIVED = 0.7
BODY_PARSED = 0.9
COMPLETE = 1.0


@runtime_checkable
class ProgressCallback(Protocol):
    """Progress callback protocol.

    Receives a fraction in [0, 1].
    """

    def __call__(self, fraction: float) -> None: ...


class ProgressTracker:
    """Forwards milestones to a callback, never reporting a smaller value.

    A retried request restarts at the ``SENT`` milestone; the tracker keeps
    the reported sequence non-decreasing.
    """

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def report(self, fraction: float) -> None:
        if self._callback is None:
            return
        fraction = min(max(fraction, self._last), 1.0)
        self._last = fraction
        self._callback(fraction)
