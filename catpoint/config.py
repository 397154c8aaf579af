from __future__ import annotations

import os

try:
    import tomllib  # py3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib

from .constants import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_SOCKET
from .state import Sensor, SensorType


def get_bool_env(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    val = val.lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def get_notifier_config():
    return {
        "enabled": get_bool_env("CATPOINT_NOTIFY", False),
        "pushover_token": os.getenv("PUSHOVER_TOKEN"),
        "pushover_user": os.getenv("PUSHOVER_USER"),
    }


def load_toml_config(path: str) -> dict:
    """Load TOML configuration from path."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _get_cfg(cfg: dict, section: str, key: str, default=None):
    sec = cfg.get(section, {})
    if not isinstance(sec, dict):
        return default
    return sec.get(key, default)


def config_defaults_from(cfg: dict) -> dict:
    """Map TOML config into argparse defaults."""
    return {
        "store": _get_cfg(cfg, "store", "type", "memory"),
        "store_path": _get_cfg(cfg, "store", "path", None),
        "classifier": _get_cfg(cfg, "classifier", "mode", "random"),
        "confidence_threshold": _get_cfg(cfg, "classifier", "confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD),
        "seed": _get_cfg(cfg, "classifier", "seed", None),
        "json": _get_cfg(cfg, "logging", "json", False),
        "no_banner": _get_cfg(cfg, "logging", "no_banner", False),
        "control_socket": _get_cfg(cfg, "control", "socket", DEFAULT_SOCKET),
    }


def sensors_from(cfg: dict) -> list:
    """Build Sensor objects from ``[[sensors]]`` tables.

    Entries without a name are skipped; the type defaults to DOOR.
    """
    sensors = []
    for entry in cfg.get("sensors", []) or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        sensors.append(Sensor(
            name=str(entry["name"]),
            type=SensorType[str(entry.get("type", "DOOR")).upper()],
        ))
    return sensors


def resolved_config_dict(args, sensors=()) -> dict:
    return {
        "store": {"type": args.store, "path": args.store_path},
        "classifier": {
            "mode": args.classifier,
            "confidence_threshold": args.confidence_threshold,
            "seed": args.seed,
        },
        "logging": {
            "no_banner": args.no_banner,
            "json": bool(args.json),
        },
        "control": {
            "socket": getattr(args, "control_socket", None),
        },
        "sensors": [{"name": s.name, "type": s.type.name} for s in sensors],
    }
