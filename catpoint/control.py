from __future__ import annotations

import json
import os
import shlex
import socket
import threading
from typing import Optional

from .constants import (
    CONTROL_ACTIVATE,
    CONTROL_ADD_SENSOR,
    CONTROL_ARM_AWAY,
    CONTROL_ARM_HOME,
    CONTROL_DEACTIVATE,
    CONTROL_DISARM,
    CONTROL_RECHECK,
    CONTROL_REMOVE_SENSOR,
    CONTROL_SCAN,
    CONTROL_STATUS,
    DEFAULT_CONFIDENCE_THRESHOLD,
    VERSION,
)
from .state import ArmingStatus, Sensor, SensorType

_ARMING = {
    CONTROL_DISARM: ArmingStatus.DISARMED,
    CONTROL_ARM_HOME: ArmingStatus.ARMED_HOME,
    CONTROL_ARM_AWAY: ArmingStatus.ARMED_AWAY,
}


class CommandError(ValueError):
    """A control command that could not be parsed or applied."""


class ControlServer:
    """Local control plane for the panel.

    Accepts one text command per connection on a UNIX socket and answers with a
    single-line JSON response. Every command runs under one lock, so the engine
    sees one decision cycle at a time even with concurrent clients.
    """
    def __init__(self, engine, logger, confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD):
        self.engine = engine
        self.logger = logger
        self.confidence_threshold = float(confidence_threshold)
        self.lock = threading.Lock()
        self._thread = None
        self._stop_evt = threading.Event()
        self._sock_path: Optional[str] = None

    # ---------------- Commands ----------------

    def handle_command(self, cmd: str) -> dict:
        """Run one command line and return the response payload."""
        try:
            parts = shlex.split(cmd or "")
        except ValueError as e:
            return {"ok": False, "error": f"bad command: {e}"}
        if not parts:
            return {"ok": False, "error": "empty command"}

        name, args = parts[0].lower(), parts[1:]
        try:
            with self.lock:
                return self._dispatch(name, args)
        except CommandError as e:
            return {"ok": False, "error": str(e)}

    def _dispatch(self, name: str, args: list) -> dict:
        if name in (CONTROL_STATUS, "state"):
            return {"ok": True, "state": self.engine.snapshot(), "version": VERSION}

        if name in _ARMING:
            self.engine.set_arming_status(_ARMING[name])
            return {"ok": True, "arming_status": self.engine.get_arming_status().name}

        if name == CONTROL_ADD_SENSOR:
            sensor = self._sensor_arg(name, args)
            if self.engine.find_sensor(sensor.name, sensor.type) is None:
                self.engine.add_sensor(sensor)
            return {"ok": True}

        if name == CONTROL_REMOVE_SENSOR:
            sensor = self._sensor_arg(name, args)
            self.engine.remove_sensor(sensor)
            return {"ok": True}

        if name in (CONTROL_ACTIVATE, CONTROL_DEACTIVATE, CONTROL_RECHECK):
            probe = self._sensor_arg(name, args)
            sensor = self.engine.find_sensor(probe.name, probe.type)
            if sensor is None:
                raise CommandError(f"unknown sensor: {probe.name} ({probe.type.name})")
            if name == CONTROL_RECHECK:
                self.engine.force_deactivate(sensor)
            else:
                self.engine.set_sensor_active(sensor, name == CONTROL_ACTIVATE)
            return {"ok": True, "alarm_status": self.engine.get_alarm_status().name}

        if name == CONTROL_SCAN:
            if not args:
                raise CommandError("usage: scan PATH [THRESHOLD]")
            threshold = self.confidence_threshold
            if len(args) > 1:
                try:
                    threshold = float(args[1])
                except ValueError:
                    raise CommandError(f"bad threshold: {args[1]}")
            try:
                with open(args[0], "rb") as f:
                    image = f.read()
            except OSError as e:
                raise CommandError(f"cannot read image: {e}")
            cat = self.engine.process_image(image, threshold)
            return {"ok": True, "cat_detected": cat, "alarm_status": self.engine.get_alarm_status().name}

        raise CommandError(f"unknown command: {name}")

    @staticmethod
    def _sensor_arg(name: str, args: list) -> Sensor:
        if len(args) != 2:
            raise CommandError(f"usage: {name} NAME TYPE")
        try:
            type_ = SensorType[args[1].upper()]
        except KeyError:
            raise CommandError(f"unknown sensor type: {args[1]}")
        return Sensor(args[0], type_)

    # ---------------- Socket ----------------

    def start(self, sock_path: str):
        """Serve commands on a UNIX socket from a background thread."""
        if not sock_path:
            return
        self._sock_path = sock_path
        t = threading.Thread(target=self._loop, daemon=True)
        t.start()
        self._thread = t
        self.logger.emit("control_socket_started", path=sock_path)

    def stop(self):
        self._stop_evt.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)

    def _loop(self):
        path = self._sock_path

        srv = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            # Remove a stale socket left by a previous run.
            if os.path.exists(path):
                os.remove(path)
            srv.bind(path)
            os.chmod(path, 0o660)
            srv.listen(4)
            srv.settimeout(0.5)
        except OSError as e:
            self.logger.emit("control_socket_error", error=str(e), path=path)
            srv.close()
            return

        try:
            while not self._stop_evt.is_set():
                try:
                    conn, _ = srv.accept()
                except socket.timeout:
                    continue
                self._serve(conn)
        finally:
            srv.close()
            if os.path.exists(path):
                os.remove(path)

    def _serve(self, conn):
        try:
            conn.settimeout(2.0)
            data = b""
            while b"\n" not in data and len(data) < 4096:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                data += chunk
            cmd = data.decode("utf-8", errors="replace").strip()
            resp = self.handle_command(cmd)
            conn.sendall((json.dumps(resp, sort_keys=True) + "\n").encode("utf-8"))
        except OSError as e:
            self.logger.emit("control_socket_error", error=str(e), path=self._sock_path)
        except Exception as e:
            self.logger.emit("control_command_error", error=str(e))
            try:
                conn.sendall((json.dumps({"ok": False, "error": str(e)}) + "\n").encode("utf-8"))
            except OSError:
                pass
        finally:
            conn.close()
