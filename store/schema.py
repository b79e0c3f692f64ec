"""
Database schema for the key-value store: one kv_store table, an admin
role that owns it and an application role that reads and writes it.
Table DDL runs as the admin role (the table owner).
"""

ADMIN_ROLE = "kv_admin"
APP_ROLE = "kv_app"
TABLE_NAME = "kv_store"


def provision_role(conn, role, password):
    """Create (or re-password) a non-superuser login role."""
    conn.autocommit = True
    with conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_roles WHERE rolname = %s", (role,))
        if cur.fetchone() is None:
            cur.execute(
                f"CREATE ROLE {role} LOGIN PASSWORD %s "
                f"NOSUPERUSER NOCREATEDB NOCREATEROLE",
                (password,),
            )
        else:
            cur.execute(f"ALTER ROLE {role} PASSWORD %s", (password,))
        cur.execute(f"GRANT USAGE ON SCHEMA public TO {role};")


def bootstrap_schema(admin_conn):
    """Create the kv_store table and grant access to the app role. Idempotent."""
    admin_conn.autocommit = True
    with admin_conn.cursor() as cur:
        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                key         TEXT PRIMARY KEY,
                value       TEXT NOT NULL,
                updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
            );
        """)
        cur.execute(
            f"GRANT SELECT, INSERT, UPDATE ON {TABLE_NAME} TO {APP_ROLE};"
        )
