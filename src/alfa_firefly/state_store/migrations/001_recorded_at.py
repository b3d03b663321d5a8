"""
Migration 001: Add recorded_at to transactions.

Ledgers created by earlier versions only store id and data; the column stays
NULL for those rows.
"""

import sqlite3

VERSION = 1
NAME = "recorded_at"


def upgrade(conn: sqlite3.Connection) -> None:
    """Add recorded_at column and index."""
    columns = {row[1] for row in conn.execute("PRAGMA table_info(transactions)")}
    if "recorded_at" not in columns:
        conn.execute("ALTER TABLE transactions ADD COLUMN recorded_at TEXT")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_transactions_recorded_at ON transactions(recorded_at)"
    )
