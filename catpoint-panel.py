#!/usr/bin/env python3
#
# Catpoint security panel
#
# Tracks arming status, sensor state and alarm status for a home security
# panel, and folds in "cat in camera frame" verdicts from an image classifier.
#
# The panel is driven over a local UNIX control socket (see catpointctl.py):
# arming commands, sensor events and image scans each run one decision cycle
# and announce alarm/arming changes to the registered listeners.
#

from __future__ import annotations

from catpoint import cli
from catpoint.cli import apply_config, build_arg_parser, build_engine, main


if __name__ == "__main__":
    raise SystemExit(main())
