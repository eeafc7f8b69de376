"""gradecore configuration.

Values are resolved in this order, first match wins:

1. keyword overrides passed to ``get_settings`` (the CLI uses these)
2. ``GRADECORE_*`` environment variables, ``__`` separating nested sections
3. the nearest ``gradecore.config.yaml`` (or ``.yml``) in the working
   directory or one of its parents
4. defaults declared below

A minimal config file::

    database_url: sqlite:///grades.db
    grading:
      strict_weights: true
      default_weights: {assignments: 0.5, quizzes: 0.3,
                        participation: 0.1, attendance: 0.1}
    logging:
      level: DEBUG

The same nested value from the environment::

    GRADECORE_GRADING__STRICT_WEIGHTS=true
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gradecore.scoring.models import GradeWeights

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("gradecore.config.yaml", "gradecore.config.yml")

# Directories examined, starting with the working directory
MAX_SEARCH_DEPTH = 10

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return the nearest config file at or above ``start_dir`` (default cwd)."""
    start = start_dir or Path.cwd()
    for directory in [start, *start.parents][:MAX_SEARCH_DEPTH]:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict.

    An unreadable or malformed file is logged and treated as empty so a
    broken config never blocks the defaults.
    """
    try:
        content = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring config file %s: %s", config_path, e)
        return {}
    return content if isinstance(content, dict) else {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base``; nested sections merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _normalize_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}. Expected one of {LOG_LEVELS}")
    return level


class LoggingSettings(BaseSettings):
    """Where and how structured logs are written."""

    level: str = Field(default="INFO", description="Minimum level emitted")
    json_output: bool = Field(
        default=False, description="Render JSON lines instead of console output"
    )
    file: str | None = Field(default=None, description="Also append logs here")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        return _normalize_level(v)


class GradingSettings(BaseSettings):
    """Grade aggregation settings."""

    strict_weights: bool = Field(
        default=False,
        description=(
            "Reject weight configurations that do not sum to 1.0 instead of "
            "normalizing them with a warning"
        ),
    )
    default_weights: GradeWeights = Field(
        default_factory=GradeWeights.default,
        description="Weights used for courses without a saved configuration",
    )
    trend_window: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of recent items compared when computing a trend",
    )
    trend_threshold: float = Field(
        default=2.0,
        ge=0.0,
        description="Percentage-point delta that counts as a trend",
    )


class GradeCoreSettings(BaseSettings):
    """Top-level gradecore settings.

    Pass ``_skip_file_loading=True`` to ignore config file discovery, as
    ``get_settings`` does once it has read an explicit file.
    """

    model_config = SettingsConfigDict(
        env_prefix="GRADECORE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    log_level: str = Field(default="INFO", description="Application log level")
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL of the grade store used by the CLI",
    )
    grading: GradingSettings = Field(default_factory=GradingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _normalize_level(v)

    @model_validator(mode="before")
    @classmethod
    def load_from_config_file(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Layer a discovered config file underneath the supplied values."""
        if data.pop("_skip_file_loading", False):
            return data

        config_path = _find_config_file()
        if config_path is None:
            return data

        logger.debug("Using config file %s", config_path)
        return _deep_merge(_load_yaml_config(config_path), data)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible view of the settings."""
        return self.model_dump(mode="json")


def get_settings(
    config_file: Path | None = None,
    **overrides: Any,
) -> GradeCoreSettings:
    """Build settings, optionally from an explicit config file.

    An explicit ``config_file`` replaces discovery; ``overrides`` win over
    both the file and the environment.
    """
    if config_file is not None and config_file.is_file():
        merged = _deep_merge(_load_yaml_config(config_file), overrides)
        return GradeCoreSettings(**merged, _skip_file_loading=True)
    return GradeCoreSettings(**overrides)


@lru_cache
def get_cached_settings() -> GradeCoreSettings:
    """Process-wide settings; reset with ``get_cached_settings.cache_clear()``."""
    return get_settings()
