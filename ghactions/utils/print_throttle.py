"""
Print Throttle
==============
Decides when the run monitor prints an interim status line.

The minimum gap between prints grows with the age of the session, so short
builds get frequent updates and long builds stay quiet. The bucket is picked
from the total elapsed time, not from the time since the last print.
"""
import time
from typing import Optional

# (elapsed strictly greater than, minimum interval between prints), seconds
PRINT_INTERVALS: list[tuple[float, float]] = [
    (25 * 60, 3 * 60),
    (8 * 60, 2 * 60),
    (5 * 60, 30),
    (3 * 60, 20),
    (60, 15),
]
DEFAULT_PRINT_INTERVAL = 10.0


def print_interval(elapsed: float) -> float:
    """Minimum seconds between status prints for a session ``elapsed`` seconds old."""
    for threshold, interval in PRINT_INTERVALS:
        if elapsed > threshold:
            return interval
    return DEFAULT_PRINT_INTERVAL


def should_print(last_printed_at: float, elapsed: float, now: Optional[float] = None) -> bool:
    """
    True if a status line is due.

    Parameters
    ----------
    last_printed_at : float
        Epoch seconds of the previous print; 0.0 if nothing was printed yet.
    elapsed : float
        Seconds since the session started.
    now : float, optional
        Current epoch seconds; defaults to ``time.time()``.
    """
    if now is None:
        now = time.time()
    return last_printed_at + print_interval(elapsed) < now
