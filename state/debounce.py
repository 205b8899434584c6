"""Cooperative debouncing without background threads.

The host drives time: every trigger pushes the deadline out by the quiet
period, and :meth:`Debouncer.poll` fires the callback once the deadline has
passed. In the Streamlit app ``poll`` runs on each script rerun.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


class Debouncer:
    """Collapse bursts of :meth:`trigger` calls into a single callback."""

    def __init__(self, delay: float, callback: Callable[[], None], *, clock: Clock = time.monotonic) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._delay = delay
        self._callback = callback
        self._clock = clock
        self._deadline: float | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def trigger(self) -> None:
        """(Re)start the quiet period; an earlier pending deadline is replaced."""

        self._deadline = self._clock() + self._delay

    def cancel(self) -> bool:
        was_pending = self._deadline is not None
        self._deadline = None
        return was_pending

    def is_due(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def poll(self) -> bool:
        """Fire the callback when the quiet period has elapsed."""

        if not self.is_due():
            return False
        return self._fire()

    def flush(self) -> bool:
        """Fire a pending callback immediately, ignoring the deadline."""

        if self._deadline is None:
            return False
        return self._fire()

    def _fire(self) -> bool:
        self._deadline = None
        self._callback()
        return True


__all__ = ["Clock", "Debouncer"]
