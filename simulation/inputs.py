"""Host input source: pointer movement, viewport resizes, viewport size query."""

import math

from core.errors import InputError

POINTER_MOVE = "pointermove"
RESIZE = "resize"
EVENTS = (POINTER_MOVE, RESIZE)


class PointerEvent:
    __slots__ = ("x", "y")

    def __init__(self, x, y):
        self.x = x
        self.y = y


class Viewport:
    __slots__ = ("width", "height")

    def __init__(self, width, height):
        self.width = width
        self.height = height


class InputHub:
    def __init__(self, width, height):
        self._listeners = {event: [] for event in EVENTS}
        self._viewport = Viewport(*_checked_size(width, height))

    @property
    def viewport(self):
        return self._viewport

    def _listeners_for(self, event):
        try:
            return self._listeners[event]
        except KeyError:
            raise InputError(f"unknown input event {event!r}", event=event) from None

    def add_listener(self, event, listener):
        listeners = self._listeners_for(event)
        if listener not in listeners:
            listeners.append(listener)

    def remove_listener(self, event, listener):
        listeners = self._listeners_for(event)
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def listener_count(self, event):
        return len(self._listeners_for(event))

    def dispatch(self, event, payload):
        # copy: a listener may deregister itself or others while handling
        for listener in list(self._listeners_for(event)):
            listener(payload)

    def pointer_move(self, x, y):
        if not (math.isfinite(x) and math.isfinite(y)):
            raise InputError(f"pointer position must be finite, got ({x}, {y})", event=POINTER_MOVE)
        self.dispatch(POINTER_MOVE, PointerEvent(x, y))

    def resize(self, width, height):
        self._viewport = Viewport(*_checked_size(width, height))
        self.dispatch(RESIZE, self._viewport)


def _checked_size(width, height):
    for value in (width, height):
        if not math.isfinite(value) or value <= 0:
            raise InputError(f"viewport size must be positive, got {width}x{height}", event=RESIZE)
    return width, height
