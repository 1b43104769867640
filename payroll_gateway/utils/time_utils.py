"""Time helpers - epoch milliseconds, the unit the rate cache stores"""

import time

MS_PER_HOUR = 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def hours_to_ms(hours: float) -> int:
    return int(hours * MS_PER_HOUR)
