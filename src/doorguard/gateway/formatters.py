"""
Telegram message formatting utilities.

Builds the plain-text replies sent by the guard: status lines, alert
texts and the /memory report.
"""

import math

from ..observability.memory import MemoryUsage

DOOR_SENSOR_NAME = "door-1"
MOTION_SENSOR_NAME = "motion-1"


def format_megabytes(n_bytes: int) -> str:
    """
    Format a byte count as megabytes rounded to two decimals.

    Rounds half up, so 1.005 MB becomes 1.01 MB. Whole values drop the
    decimal part.

    Examples:
        >>> format_megabytes(0)
        '0 MB'

        >>> format_megabytes(1572864)
        '1.5 MB'
    """
    megabytes = math.floor(n_bytes / 1024 / 1024 * 100 + 0.5) / 100
    if megabytes.is_integer():
        return f"{int(megabytes)} MB"
    return f"{megabytes} MB"


def format_memory_report(usage: MemoryUsage) -> str:
    """Render the four-line /memory reply.

    Every line but the last ends with a space before the newline.
    """
    return " \n".join(
        [
            f"RSS: {format_megabytes(usage.rss)}",
            f"HEAP (total): {format_megabytes(usage.heap_total)}",
            f"HEAP (used): {format_megabytes(usage.heap_used)}",
            f"EXTERNAL: {format_megabytes(usage.external)}",
        ]
    )


def format_status(enabled: bool) -> str:
    return "Guard: " + ("enabled" if enabled else "disabled")


def format_door_alert(opened: bool) -> str:
    state = "opened" if opened else "closed"
    return f'Magnet sensor "{DOOR_SENSOR_NAME}" is {state}'


def format_motion_alert() -> str:
    return f'Motion detected on sensor "{MOTION_SENSOR_NAME}"'
