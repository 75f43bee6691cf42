"""
Tests for Markdown and structured report rendering.
"""

import json

import pytest
import yaml

from upcoming_changes.report import dump_structured, render_document, render_module

REPORT = {
    "Get-AzWidget": {
        "AllParameterSets": {
            "CmdletBreakingChange": ["The cmdlet is being deprecated."],
            "ParameterBreakingChange": {"Name": "The parameter 'Name' is changing."},
        },
        "ByName": {"CmdletBreakingChange": ["The parameter set 'ByName' is changing."]},
    },
    "Remove-AzWidget": {
        "AllParameterSets": {"ParameterBreakingChange": {"Force": "Force goes away"}},
    },
}


class TestMarkdown:
    """Tests for Markdown rendering."""

    def test_render_module(self):
        assert render_module("Az.Widget", REPORT) == (
            "# Az.Widget\n"
            "\n"
            "## Get-AzWidget\n"
            "\n"
            "The cmdlet is being deprecated.\n"
            "\n"
            "### Name\n"
            "\n"
            "The parameter 'Name' is changing.\n"
            "\n"
            "**Parameter set `ByName`**\n"
            "\n"
            "The parameter set 'ByName' is changing.\n"
            "\n"
            "## Remove-AzWidget\n"
            "\n"
            "### Force\n"
            "\n"
            "Force goes away\n"
        )

    def test_empty_module_renders_nothing(self):
        assert render_module("Az.Quiet", {}) == ""

    def test_multi_line_message(self):
        report = {"Get-A": {"AllParameterSets": {"CmdletBreakingChange": ["one\ntwo"]}}}
        assert render_module("M", report) == "# M\n\n## Get-A\n\none\\\ntwo\n"

    def test_invocation_change_lines_stay_separate(self):
        message = (
            "The cmdlet is changing.\n"
            "Cmdlet invocation changes:\n"
            "    Old Way: Get-A -Name x\n"
            "    New Way: Get-A -Id x"
        )
        report = {"Get-A": {"AllParameterSets": {"ParameterBreakingChange": {"Name": message}}}}

        assert render_module("M", report).endswith(
            "### Name\n\n"
            "The cmdlet is changing.\\\n"
            "Cmdlet invocation changes:\\\n"
            "    Old Way: Get-A -Name x\\\n"
            "    New Way: Get-A -Id x\n"
        )

    def test_render_document_skips_empty_modules(self):
        reports = {
            "Az.A": {"Get-A": {"AllParameterSets": {"CmdletBreakingChange": ["a"]}}},
            "Az.Quiet": {},
            "Az.B": {"Get-B": {"AllParameterSets": {"CmdletBreakingChange": ["b"]}}},
        }
        assert render_document(reports) == (
            "# Az.A\n\n## Get-A\n\na\n\n# Az.B\n\n## Get-B\n\nb\n"
        )

    def test_render_document_without_changes(self):
        assert render_document({"Az.Quiet": {}}) == ""


class TestStructured:
    """Tests for JSON/YAML serialization."""

    def test_json(self):
        text = dump_structured(REPORT, "json")
        assert json.loads(text) == REPORT
        assert text.startswith('{\n  "Get-AzWidget"')

    def test_yaml_keeps_order(self):
        text = dump_structured(REPORT, "yaml")

        assert yaml.safe_load(text) == REPORT
        assert text.index("Get-AzWidget") < text.index("Remove-AzWidget")
        assert text.index("AllParameterSets") < text.index("ByName")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported format"):
            dump_structured(REPORT, "xml")
