from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from argparse import RawDescriptionHelpFormatter

from .classifier import RandomClassifier, StaticClassifier
from .config import (
    config_defaults_from,
    get_notifier_config,
    load_toml_config,
    resolved_config_dict,
    sensors_from,
)
from .constants import VERSION, USAGE_EXAMPLES
from .control import ControlServer
from .engine import AlarmEngine
from .logging import JsonLogger
from .notify import AlarmNotifier, Notifier
from .store import JsonStateStore, MemoryStateStore

STORE_TYPES = ("memory", "json")
CLASSIFIER_MODES = ("random", "always", "never")


def build_arg_parser(defaults=None):
    """Construct the CLI argument parser for the panel daemon."""
    ap = argparse.ArgumentParser(epilog=USAGE_EXAMPLES, formatter_class=RawDescriptionHelpFormatter)
    # Defaults come from the built-in defaults; TOML values are backfilled after parsing.
    if defaults is None:
        defaults = config_defaults_from({})
    ap.set_defaults(**defaults)
    ap.add_argument("--store", choices=STORE_TYPES, help="Where panel state lives (default: memory).")
    ap.add_argument("--store-path", help="JSON file used by --store json.")
    ap.add_argument("--classifier", choices=CLASSIFIER_MODES,
                    help="Cat classifier: random guess, or always/never report a cat.")
    ap.add_argument("--confidence-threshold", type=float,
                    help="Confidence threshold passed to the classifier for 'scan' commands.")
    ap.add_argument("--seed", type=int, help="Seed for the random classifier.")
    json_group = ap.add_mutually_exclusive_group()
    json_group.add_argument("--json", dest="json", action="store_true", help="Emit JSON log events.")
    json_group.add_argument("--no-json", dest="json", action="store_false", help="Disable JSON log output.")
    ap.add_argument("--no-banner", dest="no_banner", action="store_true", help="Disable the startup banner.")
    ap.add_argument("--banner", dest="no_banner", action="store_false", help="Enable the startup banner.")
    sock_group = ap.add_mutually_exclusive_group()
    sock_group.add_argument("--control-socket", dest="control_socket",
                            help="Path to the local UNIX control socket.")
    sock_group.add_argument("--no-control-socket", dest="control_socket", action="store_const", const="",
                            help="Disable the local control socket.")
    ap.add_argument("--config", help="Path to a TOML config file. CLI args override config values.")
    ap.add_argument("--print-config", action="store_true", help="Print the resolved configuration and exit.")
    ap.add_argument("--version", action="store_true", help="Print version and exit.")
    return ap


def apply_config(args, argv=None) -> list:
    """Backfill args from ``--config`` and return the configured sensors.

    Only options that were not given on the command line take the TOML value.
    """
    if not getattr(args, "config", None):
        return []
    cfg = load_toml_config(args.config)
    given = build_arg_parser(defaults={k: None for k in config_defaults_from({})}).parse_args(
        sys.argv[1:] if argv is None else argv
    )
    for k, v in config_defaults_from(cfg).items():
        if getattr(given, k, None) is None:
            setattr(args, k, v)
    return sensors_from(cfg)


def build_store(args):
    if args.store == "json":
        if not args.store_path:
            raise SystemExit("--store json requires --store-path")
        return JsonStateStore(args.store_path)
    if args.store == "memory":
        return MemoryStateStore()
    raise SystemExit(f"unknown store type: {args.store}")


def build_classifier(args):
    if args.classifier == "always":
        return StaticClassifier(True)
    if args.classifier == "never":
        return StaticClassifier(False)
    return RandomClassifier(seed=args.seed)


def build_engine(args, logger, sensors=()):
    """Assemble store, classifier and engine, and seed configured sensors."""
    engine = AlarmEngine(build_store(args), build_classifier(args), logger)
    for sensor in sensors:
        if engine.find_sensor(sensor.name, sensor.type) is None:
            engine.add_sensor(sensor)
    return engine


def main(argv=None):
    """CLI entry point. Parses args, wires the panel and serves until signalled."""
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    sensors = apply_config(args, argv)

    if args.version:
        print(VERSION)
        return 0

    if args.print_config:
        print(json.dumps(resolved_config_dict(args, sensors), indent=2, sort_keys=True))
        return 0

    logger = JsonLogger(enable_json=bool(args.json))
    engine = build_engine(args, logger, sensors)

    notifier = Notifier(**get_notifier_config())
    if notifier.enabled:
        engine.add_status_listener(AlarmNotifier(notifier))

    if not args.no_banner:
        print(f"catpoint {VERSION}")
        logger.emit(
            "startup",
            version=VERSION,
            store=args.store,
            classifier=args.classifier,
            confidence_threshold=args.confidence_threshold,
            sensors=len(engine.get_sensors()),
            arming_status=engine.get_arming_status().name,
            alarm_status=engine.get_alarm_status().name,
            notify=int(notifier.enabled),
            control_socket=args.control_socket or None,
        )

    server = ControlServer(engine, logger, confidence_threshold=args.confidence_threshold)
    if args.control_socket:
        server.start(args.control_socket)

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())
    while not stop.is_set():
        stop.wait(0.2)

    server.stop()
    logger.emit("shutdown")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
