"""
Runtime settings.

Defaults cover everything; an optional YAML file can override any of them.
The file is taken from the ``path`` argument, or else from the
ASTROSONIC_CONFIG environment variable.

Example settings file:

    sample_rate: 22050
    default_genre: jazz
    default_duration: 30
"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from astrosonic.errors import ConfigError


CONFIG_ENV_VAR = "ASTROSONIC_CONFIG"


class Settings(BaseModel):
    """Defaults used by the CLI and the generation facade."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sample_rate: int = Field(default=44100, gt=0)
    default_genre: str = "ambient"
    default_tempo: float = Field(default=120.0, gt=0.0)
    default_duration: float = Field(default=60.0, ge=0.0)
    min_wav_bytes: int = Field(default=1000, ge=0)
    headroom: float = Field(default=0.8, gt=0.0, le=1.0)
    tables_path: Optional[str] = None

    @field_validator("default_genre")
    @classmethod
    def validate_genre(cls, v: str) -> str:
        return v.strip().lower()


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build Settings from defaults plus an optional YAML file.

    Raises:
        ConfigError: If the file cannot be read, is not a YAML mapping, or
            holds invalid values
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read settings from {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc
