"""Runtime settings for ContextGuard.

Settings only switch stages on or off and bound the work the callers hand
to the pipeline. Scoring thresholds live in :mod:`contextguard.constants`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import DEFAULT_BATCH_CONCURRENCY, MAX_SOURCE_BYTES
from .core.exceptions import InvalidConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONTEXTGUARD_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class AnalysisSettings(BaseModel):
    """Settings shared by the engine, the CLI and logging setup."""

    enable_secret_detection: bool = Field(
        default=True,
        description="Scan for credential signatures",
    )
    enable_business_logic_detection: bool = Field(
        default=True,
        description="Score business-logic domains",
    )
    enable_framework_detection: bool = Field(
        default=True,
        description="Detect frontend/backend frameworks",
    )
    max_source_bytes: int = Field(
        default=MAX_SOURCE_BYTES,
        gt=0,
        description="Largest source file the CLI will analyze",
    )
    batch_concurrency: int = Field(
        default=DEFAULT_BATCH_CONCURRENCY,
        ge=1,
        description="Analyses run at once by analyze_many",
    )
    log_level: str = Field(default="INFO", description="Level for the contextguard loggers")
    log_file: str | None = Field(default=None, description="Optional decision log file")
    json_logs: bool = Field(default=False, description="Render console logs as JSON lines")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AnalysisSettings:
        """Build settings from ``CONTEXTGUARD_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests)

        Raises:
            InvalidConfigError: If a variable holds a value that cannot be used
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for name, field in cls.model_fields.items():
            key = f"{ENV_PREFIX}{name.upper()}"
            raw = env.get(key)
            if raw is None:
                continue
            if field.annotation is bool:
                values[name] = _parse_bool(key, raw)
            else:
                values[name] = raw

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            setting = str(first["loc"][0]) if first.get("loc") else None
            raise InvalidConfigError(
                f"Invalid ContextGuard setting {setting}: {first['msg']}", setting=setting
            ) from e


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidConfigError(f"{key} must be a boolean, got {raw!r}", setting=key)


# Global settings instance
_settings: AnalysisSettings | None = None


def get_settings() -> AnalysisSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AnalysisSettings.from_env()
        logger.debug(f"Loaded settings: {_settings.model_dump()}")
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
