"""Configuration for Tradebook."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from tradebook.analytics.filters import TimeFilter

logger = logging.getLogger(__name__)


class DatabaseConfig(BaseModel):
    """PostgreSQL connection settings for the postgres storage backend."""

    host: str = "localhost"
    port: int = 5432
    database: str = "tradebook"
    user: str = "tradebook"
    password: str = ""

    @property
    def dsn(self) -> str:
        """PostgreSQL connection string."""
        pw = f":{self.password}" if self.password else ""
        return f"postgresql://{self.user}{pw}@{self.host}:{self.port}/{self.database}"

    def with_env_overrides(self) -> DatabaseConfig:
        """Apply TRADEBOOK_DB_* environment variables on top of this config."""
        return DatabaseConfig(
            host=os.environ.get("TRADEBOOK_DB_HOST", self.host),
            port=int(os.environ.get("TRADEBOOK_DB_PORT", self.port)),
            database=os.environ.get("TRADEBOOK_DB_NAME", self.database),
            user=os.environ.get("TRADEBOOK_DB_USER", self.user),
            password=os.environ.get("TRADEBOOK_DB_PASSWORD", self.password),
        )


class StorageConfig(BaseModel):
    """Where the coin registry and trade ledger are kept."""

    backend: Literal["file", "postgres"] = "file"
    path: str = "~/.tradebook"

    @property
    def root(self) -> Path:
        return Path(self.path).expanduser()


class DisplayConfig(BaseModel):
    """Presentation defaults for the CLI."""

    default_filter: TimeFilter = TimeFilter.LIFETIME
    quote_currency: str = "USDT"


class TradebookConfig(BaseModel):
    """Top-level configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @classmethod
    def from_toml(cls, path: Path | str) -> TradebookConfig:
        """Load configuration from a TOML file."""
        path = Path(path)
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, explicit_path: str | None = None) -> TradebookConfig | None:
        """Find and load config: explicit path > TRADEBOOK_CONFIG env > tradebook.toml in cwd.

        Returns None if no config file is found.
        """
        if explicit_path:
            logger.info("Loading config from %s", explicit_path)
            return cls.from_toml(explicit_path)
        env_path = os.environ.get("TRADEBOOK_CONFIG")
        if env_path:
            logger.info("Loading config from TRADEBOOK_CONFIG=%s", env_path)
            return cls.from_toml(env_path)
        default = Path("tradebook.toml")
        if default.exists():
            logger.info("Loading config from %s", default)
            return cls.from_toml(default)
        return None
