"""
SQLite-based ledger implementation.

Tables:
- transactions: fingerprint → row JSON (layout shared with ledgers written by
  earlier versions of the importer, so existing files keep deduplicating)
- migrations: applied schema migrations
"""

import json
import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntry:
    """Record of one imported row."""

    fingerprint: str
    row: dict[str, str]
    recorded_at: str | None  # ISO timestamp; None for entries from old ledgers

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "LedgerEntry":
        """Create from database row."""
        return cls(
            fingerprint=row["id"],
            row=json.loads(row["data"]),
            recorded_at=row["recorded_at"],
        )


class LedgerStore:
    """
    SQLite ledger of submitted rows.

    Every write is its own committed transaction, so a crash can never leave a
    row marked as processed without its entry, nor the reverse.

    Single-writer: one import run per database file. Concurrent runs against
    the same file are not guarded against.

    sqlite3 errors are not caught here; without the ledger the importer cannot
    guarantee idempotency, so callers treat them as fatal.
    """

    def __init__(self, db_path: Path | str, run_migrations: bool = True):
        """
        Initialize ledger store.

        Args:
            db_path: Path to SQLite database file (created if absent)
            run_migrations: Whether to run pending migrations (default True)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        if run_migrations:
            self._run_migrations()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
            """
            )

    def _run_migrations(self) -> None:
        """Run pending database migrations."""
        from .migrations import MigrationRunner

        conn = self._get_connection()
        try:
            runner = MigrationRunner(conn)
            runner.run_pending()
        finally:
            conn.close()

    def exists(self, fingerprint: str) -> bool:
        """Check whether a fingerprint has already been recorded."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT 1 FROM transactions WHERE id = ?", (fingerprint,)
            ).fetchone()
        return row is not None

    def record(self, fingerprint: str, row: Mapping[str, str]) -> None:
        """
        Durably record an imported row.

        Raises:
            sqlite3.IntegrityError: If the fingerprint is already recorded
        """
        now = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO transactions (id, data, recorded_at) VALUES (?, ?, ?)",
                (fingerprint, json.dumps(dict(row), ensure_ascii=False), now),
            )
        logger.debug(f"Recorded ledger entry {fingerprint}")

    def get(self, fingerprint: str) -> LedgerEntry | None:
        """Get a ledger entry by fingerprint."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, data, recorded_at FROM transactions WHERE id = ?", (fingerprint,)
            ).fetchone()
        return LedgerEntry.from_row(row) if row else None

    def count(self) -> int:
        """Number of recorded entries."""
        with self._transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

    def last_recorded_at(self) -> str | None:
        """Timestamp of the most recent entry that has one."""
        with self._transaction() as conn:
            return conn.execute("SELECT MAX(recorded_at) FROM transactions").fetchone()[0]
