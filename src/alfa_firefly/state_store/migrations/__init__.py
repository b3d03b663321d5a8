"""
Ledger schema migrations.

Versioned, forward-only upgrades for the SQLite ledger, applied in order and
tracked in a migrations table.
"""

from .runner import LedgerMigration, MigrationRunner, discover_migrations

__all__ = ["LedgerMigration", "MigrationRunner", "discover_migrations"]
