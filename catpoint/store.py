from __future__ import annotations

import json
import os
from typing import Set

from .state import AlarmStatus, ArmingStatus, Sensor


class MemoryStateStore:
    """In-process holder of arming status, alarm status and registered sensors.

    The engine reads and writes through this object on every decision; it is
    the single source of truth for panel state."""
    def __init__(
        self,
        arming_status: ArmingStatus = ArmingStatus.DISARMED,
        alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
        sensors=None,
    ):
        self._arming_status = arming_status
        self._alarm_status = alarm_status
        self._sensors: Set[Sensor] = set(sensors or ())

    def get_arming_status(self) -> ArmingStatus:
        return self._arming_status

    def set_arming_status(self, status: ArmingStatus) -> None:
        self._arming_status = status
        self._saved()

    def get_alarm_status(self) -> AlarmStatus:
        return self._alarm_status

    def set_alarm_status(self, status: AlarmStatus) -> None:
        self._alarm_status = status
        self._saved()

    def get_sensors(self) -> Set[Sensor]:
        return set(self._sensors)

    def add_sensor(self, sensor: Sensor) -> None:
        self._sensors.add(sensor)
        self._saved()

    def remove_sensor(self, sensor: Sensor) -> None:
        self._sensors.discard(sensor)
        self._saved()

    def update_sensor(self, sensor: Sensor) -> None:
        """Record a changed sensor. Unregistered sensors are ignored."""
        if sensor not in self._sensors:
            return
        # The registered object may be a different instance with the same identity.
        for registered in self._sensors:
            if registered == sensor and registered is not sensor:
                registered.active = sensor.active
        self._saved()

    def to_dict(self) -> dict:
        return {
            "arming_status": self._arming_status.name,
            "alarm_status": self._alarm_status.name,
            "sensors": [s.to_dict() for s in sorted(self._sensors, key=lambda s: (s.name, s.type.name))],
        }

    def _saved(self) -> None:
        """Hook run after every mutation."""


class JsonStateStore(MemoryStateStore):
    """State store backed by a JSON document on disk.

    The whole state is rewritten after each mutation and read back on
    construction; a missing file means default state. Writes go through a
    temporary file and a rename, with no fsync."""
    def __init__(self, path: str):
        self.path = path
        data = self._load(path)
        super().__init__(
            arming_status=ArmingStatus[data.get("arming_status", ArmingStatus.DISARMED.name)],
            alarm_status=AlarmStatus[data.get("alarm_status", AlarmStatus.NO_ALARM.name)],
            sensors=[Sensor.from_dict(s) for s in data.get("sensors", [])],
        )

    @staticmethod
    def _load(path: str) -> dict:
        if not os.path.exists(path):
            return {}
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        if not text.strip():
            return {}
        return json.loads(text)

    def _saved(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp, self.path)
