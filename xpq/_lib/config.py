from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xpq.errors import ConfigError

CONFIG_ENV_VAR = "XPQ_CONFIG"

OUTPUT_FORMATS = ("table", "vertical", "csv")
FORMAT_ALIASES = {"v": "vertical", "t": "table"}


def _deep_merge(base: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_configs(paths: Iterable[str]) -> Dict[str, Any]:
    """
    Load and merge one or more YAML config files.
    Later configs override values from earlier ones.
    """
    merged: Dict[str, Any] = {}
    for path_str in paths:
        path = Path(path_str)
        if not path.exists():
            raise ConfigError(f"Config not found: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config is not valid YAML: {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping: {path}")
        merged = _deep_merge(merged, data)
    return merged


def normalize_format(value: str) -> str:
    value = str(value).strip().lower()
    return FORMAT_ALIASES.get(value, value)


class OutputSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    format: Literal["table", "vertical", "csv"] = "table"
    batch_size: int = Field(default=500, ge=1)
    min_width: int = Field(default=0, ge=0)

    @field_validator("format", mode="before")
    @classmethod
    def check_format(cls, v):
        return normalize_format(v)


class ReadSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    limit: int = Field(default=300, ge=0)


class SampleSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    limit: int = Field(default=100, ge=0)
    seed: Optional[int] = None


class FrequencySettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    limit: Optional[int] = Field(default=None, ge=0)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    log_level: str = "WARNING"
    output: OutputSettings = Field(default_factory=OutputSettings)
    read: ReadSettings = Field(default_factory=ReadSettings)
    sample: SampleSettings = Field(default_factory=SampleSettings)
    frequency: FrequencySettings = Field(default_factory=FrequencySettings)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v):
        level = str(v).strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level


def config_paths(explicit: Iterable[str] = ()) -> List[str]:
    """
    Config files from ``XPQ_CONFIG`` (os.pathsep separated) followed by ``explicit``.
    """
    env_value = os.getenv(CONFIG_ENV_VAR, "")
    from_env = [p for p in env_value.split(os.pathsep) if p.strip()]
    return from_env + list(explicit)


def load_settings(paths: Iterable[str] = ()) -> Settings:
    data = load_configs(config_paths(paths))
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
