"""Wall clock and frame clock timestamps."""

import time
from datetime import datetime, timezone


def now_micros():
    """Current time in microseconds since Unix epoch."""
    return int(time.time() * 1_000_000)


def monotonic_ms():
    """Milliseconds on a monotonic clock, the way frame callbacks are stamped."""
    return time.perf_counter() * 1000.0


def format_timestamp(epoch_us=None):
    """Format timestamp as ISO 8601 UTC with microseconds."""
    if epoch_us is None:
        epoch_us = now_micros()
    moment = datetime.fromtimestamp(epoch_us / 1_000_000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"
