"""
Tests for module aggregation and the report entry points.
"""

import pytest
from builders import command, marker, parameter

from upcoming_changes.aggregate import aggregate_module, locate_module
from upcoming_changes.config import Settings
from upcoming_changes.driver import (
    collect_reports,
    discover_modules,
    export_breaking_changes,
    get_module_breaking_changes,
)
from upcoming_changes.exceptions import MissingArtifactError
from upcoming_changes.report import dump_structured, render_document, render_module

WIDGET_REPORT = {
    "Remove-AzWidget": {
        "AllParameterSets": {"CmdletBreakingChange": ["Removed in next major version"]}
    },
    "Set-AzWidgetConfig": {
        "AllParameterSets": {"ParameterBreakingChange": {"Mode": "Mode will become mandatory"}}
    },
}

WIDGET_MARKDOWN = (
    "# Az.Widget\n"
    "\n"
    "## Remove-AzWidget\n"
    "\n"
    "Removed in next major version\n"
    "\n"
    "## Set-AzWidgetConfig\n"
    "\n"
    "### Mode\n"
    "\n"
    "Mode will become mandatory\n"
)

SCRIPT_WITH_MARKERS = """
function Get-AzThing {
    [GenericBreakingChange("Script says so")]
    param(
        [ParameterBreakingChange("Name", ReplacementCmdletParameterName = "ThingName")]
        [string] $Name
    )
}
"""


@pytest.fixture
def fake_binary(monkeypatch):
    """Replace the assembly reader with canned command descriptors."""
    commands = [
        command(
            "Get-AzThing",
            marker("GenericBreakingChange", "Binary says so"),
            parameters=[
                parameter("Name", marker("Parameter"), marker("GenericBreakingChange", "x"))
            ],
        ),
        command("Get-AzThing", marker("CmdletBreakingChange"), parameter_set="ByResourceId"),
    ]
    read = []

    def _read_binary_commands(path):
        read.append(path)
        return commands

    monkeypatch.setattr("upcoming_changes.aggregate.read_binary_commands", _read_binary_commands)
    return read


class TestLocateModule:
    """Tests for component discovery."""

    def test_fixture_layout(self, artifacts_dir):
        layout = locate_module(artifacts_dir / "Az.Widget")

        assert layout.name == "Az.Widget"
        assert layout.manifest.version == "2.1.0"
        assert layout.binaries == []
        # The root .psm1 is a loader, only components under custom/ are scanned
        assert [p.name for p in layout.scripts] == ["Az.Widget.custom.psm1"]

    def test_component_folders_from_settings(self, make_module):
        module_dir = make_module(
            "Az.Thing",
            {
                "bin/Az.Thing.private.dll": b"MZ",
                "lib/Az.Thing.private.dll": b"MZ",
                "internal/Az.Thing.internal.psm1": "",
            },
        )

        layout = locate_module(module_dir, Settings(script_dirs=["internal"]))

        assert [p.parent.name for p in layout.binaries] == ["bin"]
        assert [p.name for p in layout.scripts] == ["Az.Thing.internal.psm1"]

    def test_missing_module_directory(self, tmp_path):
        with pytest.raises(MissingArtifactError) as exc_info:
            locate_module(tmp_path / "Az.Gone")
        assert exc_info.value.kind == "module directory"

    def test_missing_manifest(self, tmp_path):
        (tmp_path / "Az.NoManifest").mkdir()

        with pytest.raises(MissingArtifactError) as exc_info:
            locate_module(tmp_path / "Az.NoManifest")
        assert exc_info.value.kind == "module manifest"


class TestAggregateModule:
    """Tests for aggregate_module()."""

    def test_fixture_module(self, artifacts_dir):
        assert aggregate_module(artifacts_dir / "Az.Widget") == WIDGET_REPORT

    def test_module_without_markers(self, artifacts_dir):
        assert aggregate_module(artifacts_dir / "Az.Quiet") == {}

    def test_binary_and_script_components_are_merged(self, make_module, fake_binary):
        module_dir = make_module(
            "Az.Thing",
            {
                "bin/Az.Thing.private.dll": b"MZ",
                "custom/Az.Thing.custom.psm1": SCRIPT_WITH_MARKERS,
            },
        )

        report = aggregate_module(module_dir)

        assert [p.name for p in fake_binary] == ["Az.Thing.private.dll"]
        assert report == {
            "Get-AzThing": {
                "AllParameterSets": {
                    "CmdletBreakingChange": ["Binary says so", "Script says so"],
                    "ParameterBreakingChange": {
                        "Name": "x\nThe parameter 'Name' is being replaced by parameter "
                        "'ThingName'."
                    },
                },
                "ByResourceId": {
                    "CmdletBreakingChange": [
                        "The cmdlet is being deprecated. There will be no replacement for it."
                    ]
                },
            }
        }


class TestDriver:
    """Tests for the report entry points."""

    def test_discover_modules(self, artifacts_dir):
        modules = discover_modules(artifacts_dir)
        assert [m.name for m in modules] == ["Az.Quiet", "Az.Widget"]

    def test_discover_missing_root(self, tmp_path):
        with pytest.raises(MissingArtifactError) as exc_info:
            discover_modules(tmp_path / "artifacts")
        assert exc_info.value.kind == "artifacts directory"

    def test_collect_reports_calls_back_per_module(self, artifacts_dir):
        seen = []
        reports = collect_reports(artifacts_dir, on_module=seen.append)

        assert seen == ["Az.Quiet", "Az.Widget"]
        assert reports == {"Az.Quiet": {}, "Az.Widget": WIDGET_REPORT}

    def test_export_writes_default_file(self, artifacts_dir, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        report_file = export_breaking_changes(artifacts_dir)

        assert report_file == tmp_path / "UpcommingBreakingChanges.md"
        assert report_file.read_text(encoding="utf-8") == WIDGET_MARKDOWN

    def test_export_to_named_file(self, artifacts_dir, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        report_file = export_breaking_changes(artifacts_dir, output_file="docs/changes.md")

        assert report_file == tmp_path / "docs" / "changes.md"
        assert report_file.exists()

    def test_export_without_changes_writes_empty_file(self, make_module, tmp_path, monkeypatch):
        make_module("Az.Empty")
        monkeypatch.chdir(tmp_path)

        report_file = export_breaking_changes(tmp_path / "artifacts")

        assert report_file.read_text() == ""

    def test_get_module_breaking_changes(self, artifacts_dir):
        assert get_module_breaking_changes("Az.Widget", artifacts_dir) == WIDGET_REPORT

    def test_get_unknown_module(self, artifacts_dir):
        with pytest.raises(MissingArtifactError):
            get_module_breaking_changes("Az.Unknown", artifacts_dir)

    def test_non_module_directory(self, artifacts_dir):
        with pytest.raises(MissingArtifactError):
            get_module_breaking_changes("docs", artifacts_dir)


class TestEndToEnd:
    """Script component to report to Markdown, for small single-command modules."""

    def test_single_command_level_marker(self, make_module):
        module_dir = make_module(
            "Az.Things",
            {
                "custom/Az.Things.custom.psm1": """
function Remove-Thing {
    [GenericBreakingChange("Removed in next major version")]
    [CmdletBinding()]
    param(
        [Parameter(Mandatory)]
        [string] $Name
    )
}
"""
            },
        )

        report = aggregate_module(module_dir)
        markdown = render_module("Az.Things", report)

        assert report == {
            "Remove-Thing": {
                "AllParameterSets": {"CmdletBreakingChange": ["Removed in next major version"]}
            }
        }
        assert "## Remove-Thing\n\nRemoved in next major version\n" in markdown
        assert "###" not in markdown

    def test_parameter_level_marker_only(self, make_module):
        module_dir = make_module(
            "Az.Config",
            {
                "custom/Az.Config.custom.psm1": """
function Set-Config {
    param(
        [GenericBreakingChange("Mode will become mandatory")]
        [string] $Mode
    )
}
"""
            },
        )

        report = aggregate_module(module_dir)

        assert report == {
            "Set-Config": {
                "AllParameterSets": {
                    "ParameterBreakingChange": {"Mode": "Mode will become mandatory"}
                }
            }
        }
        assert "### Mode\n\nMode will become mandatory\n" in render_module("Az.Config", report)

    def test_no_markers_anywhere(self, artifacts_dir):
        report = aggregate_module(artifacts_dir / "Az.Quiet")

        assert report == {}
        assert render_document({"Az.Quiet": report}) == ""

    def test_repeated_runs_are_identical(self, artifacts_dir):
        first = dump_structured(aggregate_module(artifacts_dir / "Az.Widget"), "json")
        second = dump_structured(aggregate_module(artifacts_dir / "Az.Widget"), "json")

        assert first == second
