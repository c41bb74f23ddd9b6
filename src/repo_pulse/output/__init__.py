"""Output handlers for Repo Pulse."""

from repo_pulse.output.console import Console
from repo_pulse.output.json_writer import build_report, write_json_report

__all__ = [
    "build_report",
    "write_json_report",
    "Console",
]
