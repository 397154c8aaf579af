"""catpoint: home security panel decision engine."""

from .state import AlarmStatus, ArmingStatus, Sensor, SensorType
from .engine import AlarmEngine
from .store import JsonStateStore, MemoryStateStore

__all__ = [
    "AlarmStatus",
    "ArmingStatus",
    "Sensor",
    "SensorType",
    "AlarmEngine",
    "JsonStateStore",
    "MemoryStateStore",
]
