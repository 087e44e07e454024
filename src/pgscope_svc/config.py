"""Configuration for pgscope service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False


@dataclass
class DatabaseConfig:
    """PostgreSQL connection configuration."""
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    name: str = "postgres"

    # Pool
    min_pool_size: int = 1
    max_pool_size: int = 10
    command_timeout: float = 60.0
    application_name: str = "pgscope"

    # Max concurrent COUNT(*) queries when refreshing table counts
    count_concurrency: int = 8

    @property
    def dsn(self) -> str:
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


@dataclass
class CacheConfig:
    """Snapshot cache configuration."""
    enabled: bool = True
    directory: str = "cache"


@dataclass
class ImpactConfig:
    """Truncate simulation configuration."""
    # Deadline for one simulation (0 = disabled)
    timeout_seconds: float = 0.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# Environment variables understood by Config.apply_env
ENV_OVERRIDES = {
    "BD_HOST": ("host", str),
    "BD_PORT": ("port", int),
    "BD_USER": ("user", str),
    "BD_NAME": ("name", str),
    "BD_PASS": ("password", str),
}

CONFIG_PATH_ENV = "PGSCOPE_CONFIG"


@dataclass
class Config:
    """Main configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    impact: ImpactConfig = field(default_factory=ImpactConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            server=ServerConfig(**data.get("server", {})),
            database=DatabaseConfig(**data.get("database", {})),
            cache=CacheConfig(**data.get("cache", {})),
            impact=ImpactConfig(**data.get("impact", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def apply_env(self, environ: dict[str, str] | None = None) -> Config:
        """Override database settings from BD_* environment variables."""
        environ = os.environ if environ is None else environ
        for var, (attr, cast) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                setattr(self.database, attr, cast(value))
        return self

    @classmethod
    def load(cls, environ: dict[str, str] | None = None) -> Config:
        """
        Build the runtime config.

        Reads the file named by PGSCOPE_CONFIG (YAML or JSON) when set,
        then applies BD_* environment overrides.
        """
        environ = os.environ if environ is None else environ
        path = environ.get(CONFIG_PATH_ENV)
        if path:
            config = cls.from_json(path) if path.endswith(".json") else cls.from_yaml(path)
        else:
            config = cls()
        return config.apply_env(environ)
