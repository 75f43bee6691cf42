"""
Configuration for upcoming-changes.

Settings come from an optional ``upcoming-changes.yaml`` in the current
directory (or a file given with ``--config``). Missing keys fall back to
DEFAULT_CONFIG.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from upcoming_changes.exceptions import InvalidConfigError, MissingArtifactError

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).parent
CONFIG_FILE_NAME = "upcoming-changes.yaml"
DEFAULT_OUTPUT_FILE = "UpcommingBreakingChanges.md"

DEFAULT_CONFIG = {
    "output_file": DEFAULT_OUTPUT_FILE,
    "components": {
        "binary_pattern": "*.private.dll",
        "binary_dirs": ["bin"],
        "script_pattern": "*.psm1",
        "script_dirs": ["custom"],
    },
}


@dataclass
class Settings:
    """Resolved configuration values."""

    output_file: str = DEFAULT_OUTPUT_FILE
    binary_pattern: str = "*.private.dll"
    binary_dirs: list[str] = field(default_factory=lambda: ["bin"])
    script_pattern: str = "*.psm1"
    script_dirs: list[str] = field(default_factory=lambda: ["custom"])

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        merged = copy.deepcopy(DEFAULT_CONFIG)
        merged["output_file"] = config.get("output_file", merged["output_file"])
        merged["components"].update(config.get("components") or {})
        return cls(output_file=merged["output_file"], **merged["components"])


def _validate_config_schema(config: dict) -> None:
    """Validate config against JSON schema."""
    schema_file = PACKAGE_ROOT / "schema/config.schema.json"
    if not schema_file.exists():
        # Schema file missing indicates installation/deployment issue
        raise FileNotFoundError(
            f"Configuration schema file not found: {schema_file}\n"
            f"This indicates an incomplete installation. Please reinstall upcoming-changes:\n"
            f"  pip install --force-reinstall upcoming-changes"
        )

    schema = json.loads(schema_file.read_text())
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        raise InvalidConfigError(
            f"{e.message} (at {'.'.join(str(p) for p in e.path) or 'top level'})"
        ) from e


def load_settings(config_file: str | Path | None = None) -> Settings:
    """
    Load settings from a YAML configuration file.

    Args:
        config_file: Explicit configuration file. When omitted,
            ``upcoming-changes.yaml`` in the current directory is used if present.

    Returns:
        Settings with defaults filled in

    Raises:
        MissingArtifactError: If an explicit configuration file does not exist
        InvalidConfigError: If the file is not valid YAML or fails validation
    """
    if config_file is None:
        config_file = Path.cwd() / CONFIG_FILE_NAME
        if not config_file.exists():
            return Settings()
    else:
        config_file = Path(config_file)
        if not config_file.exists():
            raise MissingArtifactError(config_file, "configuration file")

    try:
        with open(config_file) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfigError(f"{config_file}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise InvalidConfigError(f"expected a mapping, got {type(config).__name__}")

    _validate_config_schema(config)
    logger.debug(f"Loaded configuration from {config_file}")
    return Settings.from_dict(config)
