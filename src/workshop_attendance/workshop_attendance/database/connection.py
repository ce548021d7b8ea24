from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

from ..core.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 3
    connection_timeout: int = 5


class DatabaseConnection:
    """Singleton-like pooled DB connection factory.

    Note: Each worker process keeps a small bounded pool; connections go back
    to the pool as soon as a repository call finishes. An exhausted pool or an
    unreachable server fails fast instead of queueing.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="workshop_attendance",
                    pool_size=int(self._config.pool_size),
                    pool_reset_session=True,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    connection_timeout=int(self._config.connection_timeout),
                )
                logger.info(
                    "MySQL pool ready: %s@%s:%s/%s (size=%s)",
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                    self._config.pool_size,
                )
            return self._pool

    def connect(self):
        try:
            return self._get_pool().get_connection()
        except (mysql.connector.errors.PoolError, mysql.connector.errors.InterfaceError) as e:
            logger.error("Database unavailable: %s", e)
            raise ServiceUnavailableError("Database is unavailable, please try again") from e
