"""
Report generation for upcoming-changes.

Renders aggregated breaking-change reports as Markdown or as JSON/YAML.
"""

from upcoming_changes.report.markdown import render_document, render_module
from upcoming_changes.report.structured import FORMATS, dump_structured

__all__ = ["FORMATS", "dump_structured", "render_document", "render_module"]
