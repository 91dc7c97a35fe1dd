"""
Runtime module.

Guard component and the startup wiring that connects it to the device
bus and Telegram.
"""

from .bootstrap import DeviceNotFoundError, run_guard
from .guard import Guard, StatusPayload

__all__ = ["DeviceNotFoundError", "Guard", "StatusPayload", "run_guard"]
