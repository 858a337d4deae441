"""
Configuration for the canonical-definition pipeline.

Uses pydantic-settings for environment variable loading. Every setting
can be provided as CANONDEF_<NAME>.

Invariants:
    - All settings have defaults that work for local development
    - latest_schema_version is validated as MAJOR.MINOR.PATCH at load time
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .versioning.engine import LATEST_SCHEMA_VERSION
from .versioning.semver import SemanticVersion


class Settings(BaseSettings):
    """Pipeline configuration loaded from environment."""

    # Versioning
    latest_schema_version: str = Field(
        default=LATEST_SCHEMA_VERSION,
        description="Schema version every document is migrated to",
    )
    registry_module: Optional[str] = Field(
        default=None,
        description="Dotted module path exposing `registry` or `get_registry()`",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log line format")

    model_config = {"env_prefix": "CANONDEF_"}

    @field_validator("latest_schema_version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        return str(SemanticVersion.parse(value))
