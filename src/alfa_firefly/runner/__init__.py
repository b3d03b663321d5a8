"""
CLI runner module.

Provides commands:
- import: Import a bank CSV export into Firefly III
- status: Show ledger statistics
- init-config: Write a default configuration file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
