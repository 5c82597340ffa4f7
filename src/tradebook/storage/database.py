"""PostgreSQL-backed key-value store."""

from __future__ import annotations

import logging

import psycopg

from tradebook.config import DatabaseConfig
from tradebook.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key          TEXT          PRIMARY KEY,
    value        TEXT          NOT NULL,
    updated_at   TIMESTAMPTZ   NOT NULL DEFAULT now()
);
"""

SELECT_VALUE = "SELECT value FROM kv_store WHERE key = %s;"

UPSERT_VALUE = """
INSERT INTO kv_store (key, value, updated_at)
VALUES (%s, %s, now())
ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = now();
"""

DELETE_VALUE = "DELETE FROM kv_store WHERE key = %s;"


class PostgresStore(KeyValueStore):
    """Keeps every key as one row of the ``kv_store`` table."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._conn: psycopg.Connection | None = None
        self._schema_ready = False

    @property
    def name(self) -> str:
        return "postgres"

    def connect(self) -> psycopg.Connection:
        """Open a connection to PostgreSQL (reused until closed)."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg.connect(self._config.dsn)
            except psycopg.Error as exc:
                raise StorageError(f"Failed to connect to {self._config.host}: {exc}") from exc
            logger.info("Connected to database at %s", self._config.host)
        return self._conn

    def init_schema(self) -> None:
        """Create the kv_store table. Safe to call multiple times."""
        if self._schema_ready:
            return
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                cur.execute(KV_SCHEMA)
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            raise StorageError(f"Failed to initialize schema: {exc}") from exc
        self._schema_ready = True
        logger.info("Database schema initialized")

    def get(self, key: str) -> str | None:
        self.init_schema()
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                cur.execute(SELECT_VALUE, (key,))
                row = cur.fetchone()
        except psycopg.Error as exc:
            conn.rollback()
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self.init_schema()
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                cur.execute(UPSERT_VALUE, (key, value))
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Stored %d bytes under %r", len(value), key)

    def delete(self, key: str) -> None:
        self.init_schema()
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                cur.execute(DELETE_VALUE, (key,))
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            raise StorageError(f"Failed to delete {key!r}: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
            logger.debug("Database connection closed")
        self._conn = None
