from __future__ import annotations

from typing import Optional, Set

from .constants import DEFAULT_CONFIDENCE_THRESHOLD
from .listeners import Listener, ListenerRegistry
from .state import AlarmStatus, ArmingStatus, Sensor

# Next alarm status for a sensor activation. ALARM has no entry: it stays put.
ESCALATION = {
    AlarmStatus.NO_ALARM: AlarmStatus.PENDING_ALARM,
    AlarmStatus.PENDING_ALARM: AlarmStatus.ALARM,
}

# Next alarm status for a sensor deactivation. NO_ALARM has no entry.
DEESCALATION = {
    AlarmStatus.PENDING_ALARM: AlarmStatus.NO_ALARM,
    AlarmStatus.ALARM: AlarmStatus.PENDING_ALARM,
}


class AlarmEngine:
    """Arming/alarm decision logic for the security panel.

    Consumes sensor events, classifier verdicts and operator arming commands,
    derives the next alarm status, writes it to the state store and announces
    changes to registered listeners.

    Every entry point re-reads the store, decides, writes and notifies before
    returning. All store writes of one call finish before any listener runs.
    The engine holds no lock: callers sharing it between threads must
    serialize calls."""
    def __init__(self, store, classifier, logger, cat_detected: bool = False):
        """
        Args:
            store: State store (arming status, alarm status, sensors).
            classifier: Object with ``classify(image, confidence_threshold) -> bool``.
            logger: Object with ``emit(event, **fields)``.
            cat_detected: Initial value of the last classifier verdict.
        """
        self.store = store
        self.classifier = classifier
        self.logger = logger
        self.cat_detected = bool(cat_detected)

        self.status_listeners = ListenerRegistry("alarm", logger)
        self.arming_listeners = ListenerRegistry("arming", logger)
        self.sensor_listeners = ListenerRegistry("sensor", logger)
        self.cat_listeners = ListenerRegistry("cat", logger)

    # ---------------- Listener registries ----------------

    def add_status_listener(self, listener: Listener) -> None:
        """Register a callback invoked with each new AlarmStatus."""
        self.status_listeners.add(listener)

    def remove_status_listener(self, listener: Listener) -> None:
        self.status_listeners.remove(listener)

    def add_arming_listener(self, listener: Listener) -> None:
        """Register a callback invoked with each new ArmingStatus."""
        self.arming_listeners.add(listener)

    def remove_arming_listener(self, listener: Listener) -> None:
        self.arming_listeners.remove(listener)

    def add_sensor_listener(self, listener: Listener) -> None:
        """Register a callback invoked with a Sensor whose state changed."""
        self.sensor_listeners.add(listener)

    def remove_sensor_listener(self, listener: Listener) -> None:
        self.sensor_listeners.remove(listener)

    def add_cat_listener(self, listener: Listener) -> None:
        """Register a callback invoked with every classifier verdict."""
        self.cat_listeners.add(listener)

    def remove_cat_listener(self, listener: Listener) -> None:
        self.cat_listeners.remove(listener)

    # ---------------- Store accessors ----------------

    def get_alarm_status(self) -> AlarmStatus:
        return self.store.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self.store.get_arming_status()

    def get_sensors(self) -> Set[Sensor]:
        return self.store.get_sensors()

    def add_sensor(self, sensor: Sensor) -> None:
        if sensor in self.store.get_sensors():
            return
        self.store.add_sensor(sensor)
        self.logger.emit("sensor_added", sensor=sensor.name, type=sensor.type.name)
        self.sensor_listeners.fire(sensor)

    def remove_sensor(self, sensor: Sensor) -> None:
        if sensor not in self.store.get_sensors():
            return
        self.store.remove_sensor(sensor)
        self.logger.emit("sensor_removed", sensor=sensor.name, type=sensor.type.name)
        self.sensor_listeners.fire(sensor)

    # ---------------- Transitions ----------------
    #
    # Helpers write to the store and queue announcements on `pending`; each
    # entry point announces only after all of its writes are done.

    def _announce(self, pending: list) -> None:
        for registry, value in pending:
            registry.fire(value)

    def _set_alarm_status(self, status: AlarmStatus, pending: list) -> None:
        """Write a new alarm status; unchanged values are neither written nor announced."""
        previous = self.store.get_alarm_status()
        if status == previous:
            return
        self.store.set_alarm_status(status)
        self.logger.emit(
            "alarm_status",
            status=status.name,
            previous=(previous.name if previous is not None else None),
        )
        pending.append((self.status_listeners, status))

    def _escalate(self, pending: list) -> None:
        if self.store.get_arming_status() == ArmingStatus.DISARMED:
            self.logger.emit("sensor_event_ignored", reason="disarmed")
            return
        nxt = ESCALATION.get(self.store.get_alarm_status())
        if nxt is not None:
            self._set_alarm_status(nxt, pending)

    def _deescalate(self, pending: list) -> None:
        nxt = DEESCALATION.get(self.store.get_alarm_status())
        if nxt is not None:
            self._set_alarm_status(nxt, pending)

    def _record_sensor(self, sensor: Sensor, active: bool, pending: list) -> None:
        changed = sensor.active != active
        sensor.active = active
        self.store.update_sensor(sensor)
        if changed:
            self.logger.emit("sensor_active", sensor=sensor.name, type=sensor.type.name, active=int(active))
            pending.append((self.sensor_listeners, sensor))

    def set_sensor_active(self, sensor: Sensor, active: bool) -> None:
        """Apply a sensor event.

        An activation always runs the escalation rule, so a sensor that reports
        "still tripped" re-triggers. A deactivation only de-escalates on an
        active -> inactive edge. The sensor's flag is updated either way.
        """
        active = bool(active)
        pending = []
        if active:
            self._escalate(pending)
        elif sensor.active:
            self._deescalate(pending)
        self._record_sensor(sensor, active, pending)
        self._announce(pending)

    def force_deactivate(self, sensor: Sensor) -> None:
        """Mark a sensor inactive and de-escalate regardless of its previous state."""
        pending = []
        self._deescalate(pending)
        self._record_sensor(sensor, False, pending)
        self._announce(pending)

    def process_image(self, image, confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> bool:
        """Classify an image and fold the verdict into the alarm status.

        A cat while armed at home raises the alarm. No cat clears the alarm only
        when no registered sensor is active. Returns the verdict.
        """
        cat = bool(self.classifier.classify(image, confidence_threshold))
        self.cat_detected = cat
        self.logger.emit("cat_verdict", cat=int(cat), threshold=confidence_threshold)

        pending = []
        if cat and self.store.get_arming_status() == ArmingStatus.ARMED_HOME:
            self._set_alarm_status(AlarmStatus.ALARM, pending)
        elif not cat and not any(s.active for s in self.store.get_sensors()):
            self._set_alarm_status(AlarmStatus.NO_ALARM, pending)

        pending.append((self.cat_listeners, cat))
        self._announce(pending)
        return cat

    def set_arming_status(self, status: ArmingStatus) -> None:
        """Apply an operator arming command.

        Disarming clears any alarm. Arming (home or away) resets every
        registered sensor to inactive without running the escalation rules.
        """
        pending = []
        if status == ArmingStatus.DISARMED:
            self._set_alarm_status(AlarmStatus.NO_ALARM, pending)

        previous = self.store.get_arming_status()
        self.store.set_arming_status(status)
        if status != previous:
            self.logger.emit(
                "arming_status",
                status=status.name,
                previous=(previous.name if previous is not None else None),
            )
            pending.append((self.arming_listeners, status))

        if status != ArmingStatus.DISARMED:
            for sensor in self.store.get_sensors():
                self._record_sensor(sensor, False, pending)

        self._announce(pending)

    def find_sensor(self, name: str, type_) -> Optional[Sensor]:
        for sensor in self.store.get_sensors():
            if sensor.name == name and sensor.type == type_:
                return sensor
        return None

    def snapshot(self) -> dict:
        """Current panel state as plain data."""
        alarm = self.store.get_alarm_status()
        arming = self.store.get_arming_status()
        sensors = sorted(self.store.get_sensors(), key=lambda s: (s.name, s.type.name))
        return {
            "arming_status": arming.name,
            "arming": arming.description,
            "alarm_status": alarm.name,
            "alarm": alarm.description,
            "cat_detected": self.cat_detected,
            "sensors": [s.to_dict() for s in sensors],
        }
