"""Utility entry points for offline session analysis."""

from .runner_report import build_session_report

__all__ = ["build_session_report"]
