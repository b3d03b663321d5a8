"""
State Store (SQLite-based).

Local ledger of rows already imported into Firefly III, keyed by row
fingerprint. Acts as the dedup index and an append-only audit log.
"""

from .sqlite_store import LedgerEntry, LedgerStore

__all__ = [
    "LedgerStore",
    "LedgerEntry",
]
