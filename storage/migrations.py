"""Ad-hoc database migrations for the sync queue database."""

from __future__ import annotations

from sqlalchemy import text


def _column_exists(conn, table: str, column: str) -> bool:
    result = conn.execute(text(f"PRAGMA table_info('{table}')"))
    return any(row[1] == column for row in result)


def ensure_outbox_table(conn) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS queuedoperation (
                seq INTEGER PRIMARY KEY,
                id TEXT NOT NULL UNIQUE,
                kind TEXT NOT NULL,
                endpoint TEXT NOT NULL,
                method TEXT NOT NULL,
                body TEXT NOT NULL,
                created_at TEXT NOT NULL,
                retry_count INTEGER NOT NULL DEFAULT 0,
                status TEXT NOT NULL DEFAULT 'PENDING',
                last_error TEXT
            )
            """
        )
    )


def ensure_outbox_columns(conn) -> None:
    # Queues written before failure diagnostics existed lack ``last_error``.
    if not _column_exists(conn, "queuedoperation", "last_error"):
        conn.execute(text("ALTER TABLE queuedoperation ADD COLUMN last_error TEXT"))


def ensure_outbox_indexes(conn) -> None:
    conn.execute(
        text("CREATE INDEX IF NOT EXISTS ix_queuedoperation_status ON queuedoperation (status)")
    )


def run_all(engine) -> None:
    with engine.begin() as conn:
        ensure_outbox_table(conn)
        ensure_outbox_columns(conn)
        ensure_outbox_indexes(conn)


__all__ = ["run_all"]
