"""Process configuration for a Matchup service.

Loaded once at startup from a JSON document and immutable afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from collections.abc import Mapping
from typing import Any

# Logical name of the gateway admin API in the ``services`` map
GATEWAY_SERVICE = "kong-admin"

# Logical name of the user service in the ``services`` map
USER_SERVICE = "user"

DEFAULT_PORTS = {"auth": 82, "user": 80, "match": 81}


class ConfigError(Exception):
    """Raised when the configuration file is missing or malformed."""

    pass


@dataclass(frozen=True)
class ServiceConfig:
    """Configuration for one service process.

    Attributes:
        user: Database user
        db_name: Database name
        host: Database host
        ssl_mode: libpq sslmode
        database_url: Full database URL; overrides the libpq fields when set
        services: Logical service name -> base URL
        ports: Port name -> port number ("service" is the HTTP port)
        password_rounds: bcrypt work factor used by the auth service
    """

    user: str = "postgres"
    db_name: str = "postgres"
    host: str = "localhost"
    ssl_mode: str = "disable"
    database_url: str | None = None
    services: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    ports: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    password_rounds: int = 12

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceConfig:
        """Create ServiceConfig from a decoded JSON document."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")

        services = data.get("services", {}) or {}
        ports = data.get("ports", {}) or {}
        if not isinstance(services, dict) or not isinstance(ports, dict):
            raise ConfigError("'services' and 'ports' must be JSON objects")

        try:
            return cls(
                user=data.get("user", "postgres"),
                db_name=data.get("dbName", "postgres"),
                host=data.get("host", "localhost"),
                ssl_mode=data.get("sslMode", "disable"),
                database_url=data.get("databaseUrl"),
                services=MappingProxyType({str(k): str(v) for k, v in services.items()}),
                ports=MappingProxyType({str(k): int(v) for k, v in ports.items()}),
                password_rounds=int(data.get("passwordRounds", 12)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    @classmethod
    def load(cls, path: Path | str) -> ServiceConfig:
        """Load configuration from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except OSError as e:
            raise ConfigError(f"Could not read configuration file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Could not decode configuration file {path}: {e}") from e
        return cls.from_dict(data)

    def service_url(self, name: str) -> str | None:
        """Base URL for a logical service name, or None if not configured."""
        url = self.services.get(name)
        return url.rstrip("/") if url else None

    def port(self, service_name: str) -> int:
        """HTTP port for this service (``ports.service`` or the service default)."""
        return self.ports.get("service", DEFAULT_PORTS.get(service_name, 8000))
