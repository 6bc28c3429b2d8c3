"""One-shot per-frame callbacks, the redraw primitive the field ticks on."""

from utils.timestamp import monotonic_ms


class FrameScheduler:
    """
    Callbacks requested now run on the next `run_pending` call, once.

    A callback that requests another frame while running lands in the
    following batch, so a self-rescheduling callback runs exactly once per
    frame. Cancelling a handle that is still waiting in the current batch
    prevents it from running.
    """

    def __init__(self):
        self._waiting = {}
        self._running = {}
        self._next_handle = 1
        self.frames = 0

    @property
    def pending(self):
        return len(self._waiting)

    def request(self, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._waiting[handle] = callback
        return handle

    def cancel(self, handle):
        if handle is None:
            return False
        if self._waiting.pop(handle, None) is not None:
            return True
        return self._running.pop(handle, None) is not None

    def run_pending(self, timestamp=None):
        """Run the current batch; returns how many callbacks ran."""
        if timestamp is None:
            timestamp = monotonic_ms()
        self._running, self._waiting = self._waiting, {}
        self.frames += 1
        ran = 0
        try:
            while self._running:
                handle = next(iter(self._running))
                callback = self._running.pop(handle)
                callback(timestamp)
                ran += 1
        finally:
            # a failing callback drops the rest of its batch, like an uncaught error in a frame
            self._running = {}
        return ran
