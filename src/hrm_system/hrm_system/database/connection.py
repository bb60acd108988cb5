from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector

_active_connection: ContextVar[Optional[Any]] = ContextVar("hrm_active_connection", default=None)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_settings(cls, db_config: dict) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` mapping."""
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hrm_db")),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Outside a transaction each repository call opens a short-lived connection.
    Inside ``transaction()`` all calls share one connection and commit once.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
        )

    def current(self):
        """Connection bound by an enclosing ``transaction()``, if any."""
        return _active_connection.get()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        outer = _active_connection.get()
        if outer is not None:
            # Nested use joins the outer unit of work.
            yield outer
            return

        conn = self.connect()
        token = _active_connection.set(conn)
        try:
            conn.start_transaction(isolation_level="READ COMMITTED")
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            _active_connection.reset(token)
            conn.close()
