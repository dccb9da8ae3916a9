# src/narratopia/config/config.py
"""Configuration system for Narratopia."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env(name: str) -> dict[str, str]:
    return {"env": name}


class DatabaseConfig(BaseModel):
    """Database configuration settings."""

    postgres_user: str = Field(default="narratopia", json_schema_extra=_env("POSTGRES_USER"))
    postgres_password: str = Field(
        default="narratopia_password", json_schema_extra=_env("POSTGRES_PASSWORD")
    )
    postgres_db: str = Field(default="narratopia", json_schema_extra=_env("POSTGRES_DB"))
    postgres_host: str = Field(default="localhost", json_schema_extra=_env("POSTGRES_HOST"))
    postgres_port: str = Field(default="5432", json_schema_extra=_env("POSTGRES_PORT"))
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts when set.
    database_url: str = Field(default="", json_schema_extra=_env("DATABASE_URL"))
    echo: bool = Field(default=False, json_schema_extra=_env("DB_ECHO"))
    auto_migrate: bool = Field(default=False, json_schema_extra=_env("DB_AUTO_MIGRATE"))

    @property
    def postgres_url(self) -> str:
        """Generate PostgreSQL connection URL with psycopg driver."""
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def url(self) -> str:
        """Return the URL the engine should connect to."""
        return self.database_url or self.postgres_url


class SystemConfig(BaseModel):
    """System configuration settings."""

    environment: str = Field(default="development", json_schema_extra=_env("NARRATOPIA_ENV"))
    log_level: str = Field(default="INFO", json_schema_extra=_env("NARRATOPIA_LOG_LEVEL"))
    log_format: str = Field(default="", json_schema_extra=_env("NARRATOPIA_LOG_FORMAT"))
    log_include_trace: bool = Field(
        default=False, json_schema_extra=_env("NARRATOPIA_LOG_INCLUDE_TRACE")
    )
    port: int = Field(default=5000, json_schema_extra=_env("PORT"))

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


class NarratopiaConfig(BaseModel):
    """Main configuration class."""

    database: DatabaseConfig = DatabaseConfig()
    system: SystemConfig = SystemConfig()

    @staticmethod
    def _section_from_env(
        section: type[BaseModel], environ: Mapping[str, str]
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, field in section.model_fields.items():
            extra = field.json_schema_extra
            if not isinstance(extra, dict):
                continue
            env_name = extra.get("env")
            if isinstance(env_name, str) and env_name in environ:
                values[name] = environ[env_name]
        return values

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> NarratopiaConfig:
        """Load configuration from environment variables.

        A local ``.env`` file is read first when ``environ`` is not given;
        variables already present in the process environment win.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        return cls(
            database=DatabaseConfig(**cls._section_from_env(DatabaseConfig, environ)),
            system=SystemConfig(**cls._section_from_env(SystemConfig, environ)),
        )


# Global configuration instance
config = NarratopiaConfig.load()
