"""Time helpers."""

import time


def now_millis() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * 1000)
