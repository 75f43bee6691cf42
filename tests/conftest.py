"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir):
    """Return path to the sample artifacts tree (Az.Widget, Az.Quiet, docs)."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def make_module(tmp_path):
    """
    Return a factory writing a built module under ``tmp_path/artifacts``.

    The factory takes the module name, a mapping of relative path -> file
    content for the components, and optionally the manifest text.
    """

    def _make(name: str, files: dict | None = None, manifest: str | None = None):
        module_dir = tmp_path / "artifacts" / name
        module_dir.mkdir(parents=True)
        (module_dir / f"{name}.psd1").write_text(
            manifest or "@{\n  ModuleVersion = '1.0.0'\n}\n", encoding="utf-8"
        )
        for relative, content in (files or {}).items():
            path = module_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return module_dir

    return _make
