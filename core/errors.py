"""Errors carrying tracking IDs."""

from utils.timestamp import format_timestamp
from utils.ksuid import generate_ksuid


class BaseSimError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = generate_ksuid()
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        return {"error_id": self.error_id,
                "timestamp": self.timestamp,
                "detail": self.args[0] if self.args else "",
                "context": self.context}


class FieldError(BaseSimError):
    """Particle field lifecycle violations (e.g. stepping an inactive field)."""

    def __init__(self, message, state=None, **kwargs):
        context = kwargs.pop("context", {})
        if state:
            context["state"] = state
        super().__init__(message, context=context, **kwargs)


class InputError(BaseSimError):
    """Rejected host input (viewport sizes, unknown event names)."""

    def __init__(self, message, event=None, **kwargs):
        context = kwargs.pop("context", {})
        if event:
            context["event"] = event
        super().__init__(message, context=context, **kwargs)
