"""
Alfa-Bank CSV export → Firefly III importer.

Streams a bank transaction export, filters settled rows, and submits each one
to the Firefly III transaction API exactly once, backed by a local SQLite
ledger of already-imported row fingerprints.
"""

__version__ = "0.1.0"
