"""Load the runner configuration file."""

import json
import logging
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from reactgtk.gest.models.config import ConfigFile, GestConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("gest.config.json", "gest.config.yaml", "gest.config.yml")


def find_config_file(cwd: Path) -> Path | None:
    """First config file present in ``cwd``."""
    for name in CONFIG_FILE_NAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def parse_config(config_file: Path) -> GestConfig:
    """Parse and validate ``config_file``.

    Raises:
        ValueError: If the file is not valid JSON/YAML or doesn't match the schema

    """
    if config_file.suffix == ".json":
        try:
            with config_file.open() as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {config_file}: {e}") from e
    else:
        try:
            with config_file.open() as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_file} must contain a mapping")

    try:
        parsed = ConfigFile.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config schema in {config_file}: {e}") from e

    return parsed


def load_config(cwd: Path | None = None) -> GestConfig:
    """Load the config of ``cwd``, falling back to defaults when absent or invalid."""
    config_file = find_config_file(cwd or Path.cwd())
    if config_file is None:
        return GestConfig()

    try:
        config = parse_config(config_file)
    except ValueError as e:
        logger.warning(str(e))
        typer.secho("Invalid config file. Using default config instead.", fg="yellow")
        return GestConfig()

    logger.info(f"Loaded config from {config_file}")
    return config
