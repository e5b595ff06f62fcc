"""Single-slot debounce for scanner input."""

import time


class ScanDebouncer:
    """
    Drops a repeat of the most recent identifier seen within the window.

    A scanner held over a code keeps emitting the same value; only the first
    emission inside the window is processed. The debouncer remembers one
    (identifier, timestamp) pair, so any different identifier passes at once.
    Each physical input surface owns its own instance.
    """

    def __init__(self, window_ms=3000, clock=time.monotonic):
        self.window = window_ms / 1000.0
        self._clock = clock
        self._last_identifier = None
        self._last_seen = None

    def should_process(self, identifier, now=None):
        """Return True and remember the identifier, or False for a repeat inside the window."""
        if now is None:
            now = self._clock()

        if (identifier == self._last_identifier
                and self._last_seen is not None
                and now - self._last_seen < self.window):
            return False

        self._last_identifier = identifier
        self._last_seen = now
        return True

    def reset(self):
        self._last_identifier = None
        self._last_seen = None

    @property
    def last(self):
        return self._last_identifier, self._last_seen
