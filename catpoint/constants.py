from __future__ import annotations

VERSION = "1.0.0"

# Confidence threshold handed to the classifier when the caller gives none.
DEFAULT_CONFIDENCE_THRESHOLD = 50.0

DEFAULT_SOCKET = "/run/catpoint/catpoint.sock"

CONTROL_STATUS = "status"
CONTROL_DISARM = "disarm"
CONTROL_ARM_HOME = "arm-home"
CONTROL_ARM_AWAY = "arm-away"
CONTROL_ADD_SENSOR = "add-sensor"
CONTROL_REMOVE_SENSOR = "remove-sensor"
CONTROL_ACTIVATE = "activate"
CONTROL_DEACTIVATE = "deactivate"
CONTROL_RECHECK = "recheck"
CONTROL_SCAN = "scan"

CONTROL_COMMANDS = (
    CONTROL_STATUS,
    CONTROL_DISARM,
    CONTROL_ARM_HOME,
    CONTROL_ARM_AWAY,
    CONTROL_ADD_SENSOR,
    CONTROL_REMOVE_SENSOR,
    CONTROL_ACTIVATE,
    CONTROL_DEACTIVATE,
    CONTROL_RECHECK,
    CONTROL_SCAN,
)


USAGE_EXAMPLES = """\
Usage examples:
  # Run with an in-memory store and the default control socket
  python catpoint-panel.py

  # Persist arming/alarm/sensor state to a JSON file
  python catpoint-panel.py --store json --store-path /var/lib/catpoint/state.json

  # Load sensors and settings from TOML, emit JSON log events
  python catpoint-panel.py --config /etc/catpoint.toml --json

  # Show the resolved configuration and exit
  python catpoint-panel.py --config /etc/catpoint.toml --print-config

  # Drive the panel from another shell
  python catpointctl.py arm-home
  python catpointctl.py activate "Front door" DOOR
  python catpointctl.py scan /tmp/frame.jpg
"""
