"""
Runtime settings for SplitEasy, read from the environment.
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    app_title: str = "SplitEasy"
    data_file: Optional[str] = "trips.json"
    currency: str = "₹"
    log_level: str = "INFO"

    @field_validator('data_file')
    @classmethod
    def empty_means_memory(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @field_validator('log_level')
    @classmethod
    def known_level(cls, v):
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


ENV_PREFIX = "SPLITEASY_"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``SPLITEASY_*`` variables, falling back to defaults."""
    environ = os.environ if environ is None else environ
    values = {}
    for field in Settings.model_fields:
        key = ENV_PREFIX + field.upper()
        if key in environ:
            values[field] = environ[key]
    return Settings(**values)
