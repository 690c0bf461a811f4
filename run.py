#!/usr/bin/env python3
"""Convenience runner for the offline session report.

Usage:
    python run.py export.json [--output report.json]
"""
from orienteering_tracker.tools.runner_report import main

if __name__ == "__main__":
    raise SystemExit(main())
