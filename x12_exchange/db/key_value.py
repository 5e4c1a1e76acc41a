"""Database service for the JSON key-value store holding partner and poller records."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from .interfaces import KeyValueStorePort


class SQLAlchemyKeyValueStoreService(KeyValueStorePort):
    """Key-value store on the `key_value` table, one JSONB value per (keyspace, key)."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_key_value_get(self, keyspace: str, key: str) -> Any | None:
        """Read one value.

        Args:
            keyspace: Logical keyspace name.
            key: Record key.

        Returns:
            Any | None: Decoded JSON value, or None when the key is absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text("SELECT value FROM key_value WHERE keyspace = :keyspace AND record_key = :record_key"),
                    {"keyspace": keyspace, "record_key": key},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to read key '{key}' from keyspace '{keyspace}'") from error

        if row is None:
            return None
        value = row["value"]
        if isinstance(value, str):
            return json.loads(value)
        return value

    def db_key_value_set(self, keyspace: str, key: str, value: Any) -> None:
        """Insert or replace one value.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO key_value (keyspace, record_key, value, updated_at_utc) "
                        "VALUES (:keyspace, :record_key, CAST(:value AS jsonb), now()) "
                        "ON CONFLICT (keyspace, record_key) DO UPDATE SET "
                        "value = EXCLUDED.value, "
                        "updated_at_utc = now()"
                    ),
                    {"keyspace": keyspace, "record_key": key, "value": json.dumps(value)},
                )
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to write key '{key}' to keyspace '{keyspace}'") from error
