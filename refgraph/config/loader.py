"""YAML and env loader with fail-fast validation."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

from refgraph.models import EngineSettings

DEFAULT_SETTINGS_PATH = "config/settings.yaml"
SETTINGS_ENV_VAR = "REFGRAPH_SETTINGS"


def _read_yaml(path: str) -> dict:
    resolved = Path(path)
    if not resolved.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with resolved.open("r", encoding="utf-8") as file_obj:
        loaded = yaml.safe_load(file_obj) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Expected object at root of YAML file: {path}")
    return loaded


def resolve_settings_path(settings_path: str | None = None) -> str:
    """Explicit path wins, then REFGRAPH_SETTINGS, then config/settings.yaml."""
    load_dotenv()
    if settings_path:
        return settings_path
    return os.getenv(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH


def load_settings(settings_path: str | None = None) -> EngineSettings:
    path = resolve_settings_path(settings_path)
    return EngineSettings.model_validate(_read_yaml(path))
