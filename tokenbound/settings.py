# tokenbound/settings.py
# -*- coding: utf-8 -*-
"""
Settings module for tokenbound-core.

Requirements:
  - pydantic>=2.5
  - pydantic-settings>=2.0
"""

from __future__ import annotations

import json
import os
import sys
from functools import lru_cache
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenbound.telemetry.logging import setup_logging
from tokenbound.types import U64_MAX


# -------------------------------
# Sub-configs
# -------------------------------

class AppMeta(BaseModel):
    name: str = Field(default="tokenbound-core")
    environment: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    version: str = Field(default=os.getenv("APP_VERSION", "0.1.0"))

class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_format: bool = Field(default=True)
    service_name: str = Field(default="tokenbound-core")

class MetricsConfig(BaseModel):
    enabled: bool = Field(default=True)

class LockConfig(BaseModel):
    # None: no cap beyond u64 arithmetic
    max_duration_seconds: Optional[int] = Field(default=None, ge=0, le=U64_MAX)

class RegistryConfig(BaseModel):
    default_salt: int = Field(default=0, ge=0)


# -------------------------------
# Settings (root)
# -------------------------------

class Settings(BaseSettings):
    """
    Centralized strongly-typed settings for tokenbound-core.
    Loads from environment (TOKENBOUND_*, nested with "__") and optional .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOKENBOUND_",
        env_nested_delimiter="__",
        env_file=os.getenv("TOKENBOUND_ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    meta: AppMeta = Field(default_factory=AppMeta)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)

    @model_validator(mode="after")
    def _env_overrides(self) -> "Settings":
        if self.meta.environment == "test":
            self.metrics.enabled = False
            self.logging.json_format = False
        return self

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.meta.environment == "prod"

    # ---------------------------
    # Helpers
    # ---------------------------

    def configure_logging(self, level: Optional[str] = None) -> None:
        """Apply logging configuration; ``level`` overrides the configured one."""
        setup_logging(
            level=level or self.logging.level,
            json_format=self.logging.json_format,
            service=self.logging.service_name,
            env=self.meta.environment,
            version=self.meta.version,
        )

    def asdict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return json.dumps(self.asdict(), ensure_ascii=False, indent=2)


# -------------------------------
# Singleton accessor
# -------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Lazy singleton. Reads from env and optional .env exactly once.
    Usage:
        from tokenbound.settings import get_settings
        settings = get_settings()
        settings.configure_logging()
    """
    try:
        s = Settings()
    except ValidationError as e:
        print("Invalid configuration:", file=sys.stderr)
        print(e, file=sys.stderr)
        raise
    return s
