"""
Breaking-change scanning.

Modules:
- extract: message extraction from a single marker
- scanner: parameter, command and command-list scanning
"""

from upcoming_changes.scan.extract import extract_message
from upcoming_changes.scan.scanner import build_report, scan_command, scan_parameter

__all__ = ["build_report", "extract_message", "scan_command", "scan_parameter"]
