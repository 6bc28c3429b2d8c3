"""Crash capture for uncaught exceptions in the main thread and in the event loop."""

import json
import os
import sys
import traceback

from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp

# Overridden from config.logging.crash_file at startup
_crash_log = "logs/crash.log"


def configure(crash_file):
    """Set crash log file path from config."""
    global _crash_log
    _crash_log = crash_file


def build_report(exc_type, exc_value, exc_tb, source="main", context=None):
    """Assemble a crash record; exc_type may be None for loop errors without an exception."""
    report = {
        "id": generate_ksuid(),
        "timestamp": format_timestamp(),
        "source": source,
        "type": exc_type.__name__ if exc_type else "Unknown",
        "msg": str(exc_value) if exc_value is not None else "",
        "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)) if exc_type else None,
    }
    if context:
        report["context"] = context
    return report


def write_report(report):
    """Append a crash record to the crash log. Never raises."""
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as file:
            file.write(json.dumps(report, default=str) + "\n")
    except OSError:
        return False
    return True


def log_crash(exc_type, exc_value, exc_tb):
    """sys.excepthook replacement: banner on stderr plus a crash record."""
    report = build_report(exc_type, exc_value, exc_tb)
    banner = "=" * 60
    sys.stderr.write(f"\n{banner}\nCRASH [{report['id']}] {report['timestamp']}\n{banner}\n")
    sys.stderr.write(f"{report['type']}: {report['msg']}\n{report['traceback'] or ''}{banner}\n\n")
    write_report(report)


def create_async_handler(logger=None):
    """Create an event loop exception handler that records task crashes."""
    def handler(loop, context):
        exc = context.get("exception")
        report = build_report(type(exc) if exc else None,
                              exc if exc else context.get("message", ""),
                              exc.__traceback__ if exc else None,
                              source="loop",
                              context={"task": str(context.get("future", context.get("task", "unknown")))})
        if logger:
            logger.error("loop exception", error=report["msg"], crash_id=report["id"])
        write_report(report)
    return handler


def install_crash_handler():
    """Install global sync exception handler."""
    sys.excepthook = log_crash
