"""feedgate.core.config

Two config surfaces only:
1) `config/default.yaml`
2) Environment variables (``FEEDGATE_`` prefix, ``__`` for nesting)

The HTTP core never sees this object. Integrations turn it into
``ClientOptions`` at the call site.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from feedgate.core.exceptions import ConfigError

if TYPE_CHECKING:
    from feedgate.core.client import ClientOptions


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def level_is_case_insensitive(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class HttpConfig(BaseModel):
    default_timeout_s: float = 30.0
    # Deployment-wide escape hatch for integrations that live on the LAN.
    integration_allow_private_networks: bool = False

    @field_validator("default_timeout_s")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("default_timeout_s must be > 0")
        return v


class Settings(BaseSettings):
    """Root configuration. Single source of truth."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)

    model_config = {"env_prefix": "FEEDGATE_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Settings:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        return cls(**raw)

    @property
    def block_private_networks(self) -> bool:
        return not self.http.integration_allow_private_networks

    def client_options(self, timeout_s: float | None = None) -> ClientOptions:
        from feedgate.core.client import ClientOptions

        return ClientOptions(
            timeout_s=self.http.default_timeout_s if timeout_s is None else timeout_s,
            block_private_networks=self.block_private_networks,
        )
