"""Configuration management for tabular-compare using Pydantic.

Settings can come from a YAML file, from environment variables prefixed with
``TABULAR_COMPARE_`` (nested keys separated by ``__``, e.g.
``TABULAR_COMPARE_COMPARISON__IGNORE_WHITESPACE=true``) or both. String
values of the form ``${NAME}`` in the YAML file are replaced by the
environment variable ``NAME``.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tabular_compare.utils.logging import LOG_LEVELS

_ENV_REFERENCE = re.compile(r"^\$\{(?P<name>[^}]+)\}$")


class PathConfig(BaseModel):
    """Snapshot, session and report locations."""

    source_snapshot: str | None = Field(default=None, description="Source model snapshot file")
    target_snapshot: str | None = Field(default=None, description="Target model snapshot file")
    session_file: str | None = Field(
        default=None, description="Session file holding skip selections"
    )
    report_dir: str = Field(default="reports", description="Directory for exported reports")


class ComparisonConfig(BaseModel):
    """Options controlling how definitions are compared and reported."""

    ignore_whitespace: bool = Field(
        default=False, description="Treat definitions differing only in whitespace as equal"
    )
    include_same_definitions: bool = Field(
        default=False, description="Show objects with identical definitions in reports"
    )


class LoggingConfig(BaseModel):
    """Console and file logging settings."""

    level: str = Field(default="WARNING", description="Console log level")
    file_level: str = Field(default="DEBUG", description="Log file level")
    format: str = Field(default="json", description="Log file format: json or console")
    file: str | None = Field(default=None, description="Log file path")

    @field_validator("level", "file_level")
    @classmethod
    def check_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}', expected one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        log_format = v.lower()
        if log_format not in ("json", "console"):
            raise ValueError(f"Unknown log format '{v}', expected json or console")
        return log_format


class CompareConfig(BaseSettings):
    """Main tabular-compare configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TABULAR_COMPARE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    paths: PathConfig = Field(default_factory=PathConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _expand_env_vars(data: Any) -> Any:
    """Replace ``${NAME}`` strings anywhere in the loaded YAML.

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    if isinstance(data, str):
        match = _ENV_REFERENCE.match(data)
        if match:
            name = match.group("name")
            if name not in os.environ:
                raise ValueError(
                    f"Environment variable '{name}' is not set "
                    "(export it or add it to your .env file)"
                )
            return os.environ[name]
    return data


def load_config_from_yaml(config_path: str | Path) -> CompareConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: YAML configuration file

    Returns:
        Validated configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, references an unset variable or
            holds invalid settings
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    data = yaml.safe_load(config_path.read_text())
    if not data:
        raise ValueError(f"Empty configuration file: {config_path}")

    return CompareConfig(**_expand_env_vars(data))


def save_config_to_yaml(config: CompareConfig, output_path: str | Path) -> None:
    """Write a configuration out as YAML, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False)
    )
