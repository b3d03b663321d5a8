"""
SSOT (Single Source of Truth) schemas for the importer.

Row parsing, fingerprinting, eligibility and the Firefly payload live here;
no other module re-implements them.
"""

from .csv_row import Row, RowParser, split_line
from .dedupe import (
    FINGERPRINT_LENGTH,
    UNIT_SEPARATOR,
    compute_row_fingerprint,
)
from .firefly_payload import (
    DATE_FORMATS,
    DEPOSIT,
    SUPPORTED_LOCALES,
    WITHDRAWAL,
    FireflyTransactionSplit,
    FireflyTransactionStore,
    TransactionTransformer,
    TransformError,
    build_transaction_store,
    parse_amount,
    parse_row_date,
    parse_timezone,
)
from .row_filter import RowFilter

__all__ = [
    # Rows
    "Row",
    "RowParser",
    "split_line",
    "RowFilter",
    # Fingerprints
    "FINGERPRINT_LENGTH",
    "UNIT_SEPARATOR",
    "compute_row_fingerprint",
    # Firefly payload (canonical output schema)
    "DATE_FORMATS",
    "SUPPORTED_LOCALES",
    "DEPOSIT",
    "WITHDRAWAL",
    "FireflyTransactionSplit",
    "FireflyTransactionStore",
    "TransactionTransformer",
    "TransformError",
    "build_transaction_store",
    "parse_amount",
    "parse_row_date",
    "parse_timezone",
]
