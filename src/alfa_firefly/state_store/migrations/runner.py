"""
Forward-only schema migrations for the ledger.

A migration is a module named ``NNN_<name>.py`` next to this file defining
``VERSION: int``, ``NAME: str`` and ``upgrade(conn)``. Applied versions are
recorded in the ``migrations`` table, one row per version.
"""

import importlib
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerMigration:
    version: int
    name: str
    upgrade: Callable[[sqlite3.Connection], None]


def discover_migrations() -> list[LedgerMigration]:
    """Load the migration modules shipped with the package, oldest first."""
    found = []
    for path in Path(__file__).parent.glob("[0-9][0-9][0-9]_*.py"):
        module = importlib.import_module(f"{__package__}.{path.stem}")
        found.append(LedgerMigration(module.VERSION, module.NAME, module.upgrade))
    return sorted(found, key=lambda m: m.version)


class MigrationRunner:
    """Brings a ledger connection up to the newest schema version."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS migrations (
                version INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
        """
        )
        self.conn.commit()

    def get_applied_versions(self) -> set[int]:
        return {row[0] for row in self.conn.execute("SELECT version FROM migrations")}

    def apply(self, migration: LedgerMigration) -> None:
        """Run one upgrade and record it; a failing upgrade leaves no trace."""
        logger.info(f"Upgrading ledger schema to v{migration.version} ({migration.name})")
        applied_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        try:
            migration.upgrade(self.conn)
            self.conn.execute(
                "INSERT INTO migrations (version, name, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.name, applied_at),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error(f"Ledger migration v{migration.version} failed: {e}")
            raise

    def run_pending(self) -> list[int]:
        """Apply every migration not yet recorded; return the versions applied."""
        applied = self.get_applied_versions()
        versions = []
        for migration in discover_migrations():
            if migration.version in applied:
                continue
            self.apply(migration)
            versions.append(migration.version)

        if versions:
            logger.info(f"Ledger schema upgraded: {versions}")
        else:
            logger.debug("Ledger schema up to date")
        return versions
