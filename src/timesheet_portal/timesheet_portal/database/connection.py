from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_settings(cls, db_config: Optional[dict]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; host, user, password and database are required."""

        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        missing = [key for key in ("host", "user", "password", "database") if key not in db_config]
        if missing:
            raise ValueError(f"DB_CONFIG is missing {', '.join(missing)}")
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """Opens one short-lived MySQL connection per repository call.

    Instances are cached per ``DBConfig`` so every container built from the
    same settings shares one factory.
    """

    _instances: dict = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def for_config(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            cls._instances[config] = cls(config)
        return cls._instances[config]

    def connect(self):
        # connection_timeout bounds the TCP handshake; per-call deadlines live in the service layer.
        return mysql.connector.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=self._config.connect_timeout,
        )
