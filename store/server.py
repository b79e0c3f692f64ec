"""
Embedded PostgreSQL server for the key-value store.
Uses pgserver for pip-installable PostgreSQL binaries; every role except
the local superuser authenticates with scram-sha-256.
"""

import logging
import os
import urllib.parse

import psycopg2

import pgserver

from store.postgres import PostgresKeyValueStore
from store.schema import ADMIN_ROLE, APP_ROLE, bootstrap_schema, provision_role


logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(
    os.path.dirname(__file__), "..", ".pgdata", "kvstore"
)

ADMIN_PASSWORD = "admin_secret"  # In production, use env var / secrets manager
APP_PASSWORD = "app_secret"

_PG_HBA = """\
# TYPE  DATABASE  USER           ADDRESS        METHOD
local   all       {superuser}                   trust
local   all       all                           scram-sha-256
host    all       all            127.0.0.1/32   scram-sha-256
host    all       all            ::1/128        scram-sha-256
"""


class KVStoreServer:
    """
    Embedded PostgreSQL instance holding the kv_store table.

    Usage:
        with KVStoreServer(data_dir="/tmp/kv") as server:
            store = server.app_store()
            store.set("fluxpool-broadcasts", "[]")
    """

    def __init__(self, data_dir=None, admin_password=None, app_password=None):
        self.data_dir = os.path.abspath(data_dir or DEFAULT_DATA_DIR)
        self.admin_password = admin_password or os.getenv("KV_ADMIN_PASSWORD", ADMIN_PASSWORD)
        self.app_password = app_password or os.getenv("KV_APP_PASSWORD", APP_PASSWORD)
        self._pg = None

    def start(self):
        """Start the server, create roles and table, then require passwords."""
        os.makedirs(self.data_dir, exist_ok=True)
        self._pg = pgserver.get_server(self.data_dir)
        self._bootstrap()
        self._require_passwords()
        logger.info("kv store server running in %s", self.data_dir)
        return self

    def stop(self):
        if self._pg:
            self._pg.cleanup()
            self._pg = None

    def conn_info(self):
        """host / port / dbname for password-authenticated connections."""
        parsed = urllib.parse.urlparse(self._pg.get_uri())
        params = urllib.parse.parse_qs(parsed.query)
        return {
            "host": params.get("host", ["/tmp"])[0],
            "port": parsed.port or 5432,
            "dbname": parsed.path.lstrip("/") or "postgres",
        }

    def app_store(self):
        """A PostgresKeyValueStore connected as the application role."""
        return PostgresKeyValueStore(
            user=APP_ROLE, password=self.app_password, **self.conn_info()
        )

    def __enter__(self):
        return self.start()

    def __exit__(self, *args):
        self.stop()

    # ── Internal ─────────────────────────────────────────────────────

    def _connect(self, user=None, password=None):
        """Superuser over the local socket when user is None."""
        if user is None:
            conn = psycopg2.connect(self._pg.get_uri())
        else:
            conn = psycopg2.connect(user=user, password=password, **self.conn_info())
        conn.autocommit = True
        return conn

    def _bootstrap(self):
        """Idempotent: safe on an existing data directory."""
        conn = self._connect()
        try:
            provision_role(conn, ADMIN_ROLE, self.admin_password)
            with conn.cursor() as cur:
                cur.execute(f"GRANT CREATE ON SCHEMA public TO {ADMIN_ROLE};")
            provision_role(conn, APP_ROLE, self.app_password)
        finally:
            conn.close()

        admin = self._connect(ADMIN_ROLE, self.admin_password)
        try:
            bootstrap_schema(admin)
        finally:
            admin.close()

    def _require_passwords(self):
        superuser = urllib.parse.urlparse(self._pg.get_uri()).username
        desired = _PG_HBA.format(superuser=superuser or os.getenv("USER", "postgres"))
        path = os.path.join(self.data_dir, "pg_hba.conf")

        current = ""
        if os.path.exists(path):
            with open(path, "r") as f:
                current = f.read()
        if current.strip() == desired.strip():
            return

        with open(path, "w") as f:
            f.write(desired)
        conn = self._connect()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT pg_reload_conf();")
        finally:
            conn.close()
        logger.info("pg_hba.conf now requires scram-sha-256 for non-superusers")
