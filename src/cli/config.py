"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Optional

import yaml

from .config_models import MindJournalConfig


def _home() -> Path:
    return Path(os.environ.get("MINDJOURNAL_HOME", Path.home() / "mindjournal")).expanduser()


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "config.yaml",
        Path.home() / ".mindjournal" / "config.yaml",
        _home() / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def _env_overrides() -> dict:
    """Environment variables that win over the config file."""
    overrides: dict = {}
    if os.getenv("MINDJOURNAL_ENV"):
        overrides.setdefault("server", {})["environment"] = os.environ["MINDJOURNAL_ENV"]
    if os.getenv("FRONTEND_ORIGIN"):
        overrides.setdefault("server", {})["frontend_origin"] = os.environ["FRONTEND_ORIGIN"]
    if os.getenv("MINDJOURNAL_HOME"):
        home = _home()
        overrides["paths"] = {
            "db": str(home / "journal.db"),
            "users_db": str(home / "users.db"),
            "log_file": str(home / "mindjournal.log"),
            "export_dir": str(home / "exports"),
        }
    return overrides


def load_config_model(config_path: Optional[Path] = None) -> MindJournalConfig:
    """Load configuration as Pydantic model with validation.

    Raises:
        ValueError: invalid YAML or values that fail validation
    """
    base_config = {}

    path = config_path or find_config()
    if path and path.exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

    merged = _deep_merge(base_config, _env_overrides())
    try:
        return MindJournalConfig.from_dict(merged)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
