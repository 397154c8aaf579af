from catpoint.classifier import StaticClassifier
from catpoint.engine import AlarmEngine
from catpoint.notify import AlarmNotifier
from catpoint.state import AlarmStatus, ArmingStatus, Sensor, SensorType
from catpoint.store import MemoryStateStore


class DummyNotifier:
    def __init__(self):
        self.calls = []

    def send(self, title, message, priority=0):
        self.calls.append((title, message, priority))


class DummyLogger:
    def emit(self, *a, **k):
        pass


def test_alarm_is_pushed_with_high_priority_and_not_repeated():
    n = DummyNotifier()
    listener = AlarmNotifier(n)

    listener(AlarmStatus.ALARM)
    listener(AlarmStatus.ALARM)

    assert len(n.calls) == 1
    assert n.calls[0][2] == 1
    assert "ALARM" in n.calls[0][1]


def test_no_alarm_is_not_pushed():
    n = DummyNotifier()
    listener = AlarmNotifier(n)

    listener(AlarmStatus.NO_ALARM)

    assert n.calls == []


def test_engine_drives_notifier_through_escalation():
    n = DummyNotifier()
    store = MemoryStateStore(arming_status=ArmingStatus.ARMED_AWAY)
    engine = AlarmEngine(store, StaticClassifier(False), DummyLogger())
    engine.add_status_listener(AlarmNotifier(n))
    sensor = Sensor("Front door", SensorType.DOOR)

    engine.set_sensor_active(sensor, True)
    engine.set_sensor_active(sensor, True)
    engine.set_arming_status(ArmingStatus.DISARMED)

    assert [c[2] for c in n.calls] == [0, 1]


def test_deescalation_is_not_pushed_but_renewed_escalation_is():
    n = DummyNotifier()
    listener = AlarmNotifier(n)

    listener(AlarmStatus.PENDING_ALARM)
    listener(AlarmStatus.ALARM)
    listener(AlarmStatus.PENDING_ALARM)
    listener(AlarmStatus.ALARM)

    assert [c[2] for c in n.calls] == [0, 1, 1]
    assert not any(c[1].startswith("PENDING_ALARM") for c in n.calls[1:])


def test_pending_after_all_clear_is_pushed_again():
    n = DummyNotifier()
    listener = AlarmNotifier(n)

    listener(AlarmStatus.PENDING_ALARM)
    listener(AlarmStatus.NO_ALARM)
    listener(AlarmStatus.PENDING_ALARM)

    assert [c[2] for c in n.calls] == [0, 0]
