# Devices - bus connection and registry of remote sensors

from .bus import BusConnection, BusError, connect
from .registry import Registry, RemoteDevice

__all__ = [
    "BusConnection",
    "BusError",
    "Registry",
    "RemoteDevice",
    "connect",
]
