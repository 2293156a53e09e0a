"""Repeating timer driving the caret blink."""

import time
from typing import Callable, Optional


class PolledBlinkTimer:
    """Blink timer for hosts with their own event loop.

    Nothing runs in the background: the host asks ``seconds_until_due`` how
    long it may wait for input and calls ``poll`` afterwards, so the callback
    always runs on the host's thread.  Each ``start`` begins a new cycle, and
    once ``cancel`` returns no further tick can fire.
    """

    def __init__(self, interval: float, callback: Callable[[], None],
                 clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self.callback = callback
        self._clock = clock
        self._due: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._due is not None

    def start(self) -> None:
        self._due = self._clock() + self.interval

    def cancel(self) -> None:
        self._due = None

    def seconds_until_due(self) -> Optional[float]:
        if self._due is None:
            return None
        return max(0.0, self._due - self._clock())

    def poll(self) -> bool:
        """Run the callback if the interval elapsed. Returns True if it ran."""
        if self._due is None or self._clock() < self._due:
            return False
        self._due = self._clock() + self.interval
        self.callback()
        return True
