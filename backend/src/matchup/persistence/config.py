"""Database configuration and engine factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from matchup.config import ServiceConfig


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_service_config(cls, config: ServiceConfig) -> DatabaseConfig:
        """Resolve the database URL for a service.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. ``databaseUrl`` from the config file
        3. libpq fields (user, dbName, host, sslMode) from the config file
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        if config.database_url:
            return cls(url=config.database_url)

        return cls(
            url=(
                f"postgresql://{config.user}@{config.host}/{config.db_name}"
                f"?sslmode={config.ssl_mode}"
            )
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        """True for an in-memory SQLite database (``sqlite://`` or ``sqlite:///:memory:``)."""
        return self.url in ("sqlite://", "sqlite:///:memory:")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver since
        the project depends on psycopg[binary], not psycopg2.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Create a pooled SQLAlchemy engine for the configured database.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if not (config.is_sqlite or config.is_postgresql):
        raise ValueError(f"Unsupported database URL scheme: {config.url}")

    if config.is_memory:
        # One shared connection, so every thread sees the same database
        return create_engine(
            config.sqlalchemy_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if config.is_sqlite:
        # Ensure parent directory exists for file-backed SQLite databases
        sqlite_path = config.url.replace("sqlite:///", "", 1)
        Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)

        # Requests are served from worker threads as well as the event loop
        return create_engine(
            config.sqlalchemy_url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(config.sqlalchemy_url, pool_pre_ping=True)
