"""
PostgresKeyValueStore — KeyValueStore backed by a PostgreSQL table.

set() is a single upsert, so each write replaces the whole value
atomically; read-modify-write sequences built on top of get()/set() are
still not isolated from concurrent writers.
"""

import logging

import psycopg2

from store.kv import KeyValueStore, StoreError
from store.schema import TABLE_NAME


logger = logging.getLogger(__name__)


class PostgresKeyValueStore(KeyValueStore):
    """
    Connects to PostgreSQL and reads/writes rows of the kv_store table.

    Usage:
        store = PostgresKeyValueStore(user="kv_app", password="secret",
                                      host="/tmp/pg", port=5432)
        store.set("fluxpool-broadcasts", "[]")
        store.get("fluxpool-broadcasts")
        store.close()
    """

    def __init__(self, user, password, host="localhost", port=5432, dbname="postgres"):
        self.user = user
        try:
            self.conn = psycopg2.connect(
                host=host,
                port=port,
                dbname=dbname,
                user=user,
                password=password,
            )
        except psycopg2.Error as e:
            raise StoreError("*", "connect", e) from e
        self.conn.autocommit = True

    def get(self, key):
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    f"SELECT value FROM {TABLE_NAME} WHERE key = %s", (key,),
                )
                row = cur.fetchone()
        except psycopg2.Error as e:
            logger.warning("kv get failed for %r: %s", key, e)
            raise StoreError(key, "get", e) from e
        return row[0] if row else None

    def set(self, key, value):
        if not isinstance(value, str):
            raise TypeError(f"value must be str, got {type(value).__name__}")
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO {TABLE_NAME} (key, value)
                    VALUES (%s, %s)
                    ON CONFLICT (key) DO UPDATE
                        SET value = EXCLUDED.value,
                            updated_at = now()
                    """,
                    (key, value),
                )
        except psycopg2.Error as e:
            logger.warning("kv set failed for %r: %s", key, e)
            raise StoreError(key, "set", e) from e

    def close(self):
        if self.conn is not None and not self.conn.closed:
            self.conn.close()
