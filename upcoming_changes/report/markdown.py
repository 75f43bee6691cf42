"""
Markdown rendering of breaking-change reports.
"""

from upcoming_changes.models import (
    ALL_PARAMETER_SETS,
    CMDLET_BREAKING_CHANGE,
    PARAMETER_BREAKING_CHANGE,
    BreakingChangeReport,
)


def _paragraph(message: str) -> str:
    """Keep the lines of a multi-line message apart with Markdown hard breaks."""
    return "\\\n".join(line.rstrip() for line in message.splitlines())


def render_module(module_name: str, report: BreakingChangeReport) -> str:
    """
    Render the report of one module.

    Layout:
        # <Module>
        ## <Command>
        <command-level message>
        ### <Parameter>
        <parameter message>

    Messages for a parameter set other than AllParameterSets are preceded by a
    bold line naming the set. Lines of a multi-line message end in a
    backslash hard break so they stay separate when rendered.

    Args:
        module_name: Module heading
        report: Report of the module

    Returns:
        Markdown text, or an empty string when the report is empty
    """
    if not report:
        return ""

    lines = [f"# {module_name}", ""]
    for command, parameter_sets in report.items():
        lines += [f"## {command}", ""]
        for parameter_set, info in parameter_sets.items():
            if parameter_set != ALL_PARAMETER_SETS:
                lines += [f"**Parameter set `{parameter_set}`**", ""]
            for message in info.get(CMDLET_BREAKING_CHANGE, []):
                lines += [_paragraph(message), ""]
            for parameter, message in info.get(PARAMETER_BREAKING_CHANGE, {}).items():
                lines += [f"### {parameter}", "", _paragraph(message), ""]

    return "\n".join(lines).rstrip("\n") + "\n"


def render_document(reports: dict[str, BreakingChangeReport]) -> str:
    """
    Render several module reports into one document.

    Modules without breaking changes contribute nothing; the others are
    separated by a blank line.
    """
    sections = [render_module(name, report) for name, report in reports.items()]
    return "\n".join(section for section in sections if section)
