from __future__ import annotations

import enum
from dataclasses import dataclass, field


class SensorType(enum.Enum):
    DOOR = "DOOR"
    WINDOW = "WINDOW"
    MOTION = "MOTION"


class ArmingStatus(enum.Enum):
    """Operator-selected mode. Only the engine's arming entry point changes it."""
    DISARMED = "Disarmed"
    ARMED_HOME = "Armed - At Home"
    ARMED_AWAY = "Armed - Away"

    @property
    def description(self) -> str:
        return self.value


class AlarmStatus(enum.Enum):
    """Escalation level of the alarm, ordered NO_ALARM < PENDING_ALARM < ALARM."""
    NO_ALARM = "Cool and Good"
    PENDING_ALARM = "I'm in Danger..."
    ALARM = "Awooga!"

    @property
    def description(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other):
        if not isinstance(other, AlarmStatus):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other):
        if not isinstance(other, AlarmStatus):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other):
        if not isinstance(other, AlarmStatus):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other):
        if not isinstance(other, AlarmStatus):
            return NotImplemented
        return self.severity >= other.severity


_SEVERITY = {
    AlarmStatus.NO_ALARM: 0,
    AlarmStatus.PENDING_ALARM: 1,
    AlarmStatus.ALARM: 2,
}


@dataclass(unsafe_hash=True)


class Sensor:
    """A named, typed trip detector.

    Identity is ``(name, type)``; ``active`` is mutable state that the engine
    flips on sensor events and arming resets, so it is left out of equality and
    hashing. Sensors stay usable as set members while they change."""
    name: str
    type: SensorType
    active: bool = field(default=False, compare=False)

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type.name, "active": bool(self.active)}

    @classmethod
    def from_dict(cls, data: dict) -> "Sensor":
        return cls(
            name=str(data["name"]),
            type=SensorType[str(data["type"]).upper()],
            active=bool(data.get("active", False)),
        )
