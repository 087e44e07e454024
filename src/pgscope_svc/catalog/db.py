"""asyncpg connection pool management for the catalog adapter."""

from __future__ import annotations

import logging

import asyncpg

from ..config import DatabaseConfig
from .adapter import CatalogConnectionError


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the asyncpg pool shared by all endpoints."""

    def __init__(self, config: DatabaseConfig):
        """
        Args:
            config: Database section of the service config.
        """
        self.config = config
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> asyncpg.Pool:
        """Get or create the connection pool."""
        if self._pool is None:
            try:
                self._pool = await asyncpg.create_pool(
                    self.config.dsn,
                    min_size=self.config.min_pool_size,
                    max_size=self.config.max_pool_size,
                    command_timeout=self.config.command_timeout,
                    server_settings={"application_name": self.config.application_name},
                )
            except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
                raise CatalogConnectionError(f"Failed to create connection pool: {e}") from e
            logger.info(
                f"Database pool established: {self.config.user}@"
                f"{self.config.host}:{self.config.port}/{self.config.name}"
            )
        return self._pool

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call connect() first.")
        return self._pool

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    @property
    def stats(self) -> dict:
        """Pool statistics."""
        if self._pool is None:
            return {"connected": False}
        return {
            "connected": True,
            "size": self._pool.get_size(),
            "idle": self._pool.get_idle_size(),
            "min_size": self._pool.get_min_size(),
            "max_size": self._pool.get_max_size(),
        }

    async def __aenter__(self) -> asyncpg.Pool:
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
