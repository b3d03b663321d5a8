"""
CSV → Firefly III import pipeline.

Each row moves through:

    parse → filter → fingerprint → duplicate check (ledger ∪ remote)
          → transform → submit → record

and ends as exactly one RowOutcome. Row-level problems are logged and
counted, never raised; ledger (sqlite3) errors propagate and end the run.

Rows are handled strictly one at a time in file order.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..schemas.csv_row import RowParser
from ..schemas.dedupe import compute_row_fingerprint
from ..schemas.firefly_payload import (
    DEPOSIT,
    TransactionTransformer,
    TransformError,
    build_transaction_store,
)
from ..schemas.row_filter import RowFilter
from ..state_store import LedgerStore
from .submitter import RemoteSubmitter

logger = logging.getLogger(__name__)


class CsvInputError(Exception):
    """Input file is missing, unreadable or has no header."""

    pass


class RowOutcome(str, Enum):
    """Terminal state of a single row."""

    FILTERED = "FILTERED"
    DUPLICATE = "DUPLICATE"
    TRANSFORM_FAILED = "TRANSFORM_FAILED"
    SUBMIT_FAILED = "SUBMIT_FAILED"
    PROCESSED = "PROCESSED"


@dataclass
class ImportStats:
    """Counters for one import run."""

    outcomes: Counter = field(default_factory=Counter)

    @property
    def processed(self) -> int:
        return self.outcomes[RowOutcome.PROCESSED]

    @property
    def skipped(self) -> int:
        return sum(n for outcome, n in self.outcomes.items() if outcome != RowOutcome.PROCESSED)

    def add(self, outcome: RowOutcome) -> None:
        self.outcomes[outcome] += 1


class ImportPipeline:
    """
    Orchestrates the import of one export file.

    The ledger and the remote fingerprint set together form the duplicate
    index. The remote set is never modified; the ledger only grows, and only
    after Firefly accepted a row.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        row_filter: RowFilter,
        transformer: TransactionTransformer,
        submitter: RemoteSubmitter,
        remote_fingerprints: Iterable[str] = (),
        delimiter: str = ",",
        quoted_fields: bool = False,
        fingerprint_separator: str = "",
        apply_rules: bool = True,
        fire_webhooks: bool = True,
        error_if_duplicate_hash: bool = False,
    ):
        self.ledger = ledger
        self.row_filter = row_filter
        self.transformer = transformer
        self.submitter = submitter
        self.remote_fingerprints = frozenset(remote_fingerprints)
        self.delimiter = delimiter
        self.quoted_fields = quoted_fields
        self.fingerprint_separator = fingerprint_separator
        self.apply_rules = apply_rules
        self.fire_webhooks = fire_webhooks
        self.error_if_duplicate_hash = error_if_duplicate_hash

    def is_duplicate(self, fingerprint: str) -> bool:
        """Known to the local ledger or to Firefly."""
        return fingerprint in self.remote_fingerprints or self.ledger.exists(fingerprint)

    def run(self, lines: Iterable[str]) -> ImportStats:
        """
        Import all rows from an iterable of lines (header first).

        Raises:
            CsvInputError: If there is no header line
            sqlite3.Error: If the ledger cannot be read or written
        """
        iterator: Iterator[str] = iter(lines)
        header = next(iterator, None)
        if header is None or not header.strip():
            raise CsvInputError("CSV is empty or has no header line")

        parser = RowParser(header, self.delimiter, self.quoted_fields)
        logger.debug(f"CSV columns: {parser.columns}")

        stats = ImportStats()
        for line_no, line in enumerate(iterator, start=2):
            if not line.strip():
                continue
            stats.add(self.process_line(parser, line, line_no))

        return stats

    def run_file(self, path: Path, encoding: str = "utf-8") -> ImportStats:
        """
        Import all rows from a CSV file.

        Raises:
            CsvInputError: If the file cannot be opened or decoded, or is empty
        """
        try:
            with open(path, encoding=encoding, newline="") as f:
                return self.run(f)
        except (OSError, UnicodeDecodeError) as e:
            raise CsvInputError(f"Cannot read CSV file {path}: {e}") from e

    def process_line(self, parser: RowParser, line: str, line_no: int) -> RowOutcome:
        """Move a single line through the pipeline."""
        row = parser.parse(line)

        if not self.row_filter.is_eligible(row):
            logger.debug(f"Line {line_no}: not eligible, skipped")
            return RowOutcome.FILTERED

        fingerprint = compute_row_fingerprint(row.values(), self.fingerprint_separator)
        if self.is_duplicate(fingerprint):
            logger.debug(f"Line {line_no}: duplicate {fingerprint}, skipped")
            return RowOutcome.DUPLICATE

        try:
            split = self.transformer.transform(row)
        except TransformError as e:
            logger.error(f"Line {line_no}: {e}")
            return RowOutcome.TRANSFORM_FAILED

        payload = build_transaction_store(
            split,
            apply_rules=self.apply_rules,
            fire_webhooks=self.fire_webhooks,
            error_if_duplicate_hash=self.error_if_duplicate_hash,
        )
        result = self.submitter.submit(payload)
        if not result.success:
            status = result.status_code if result.status_code is not None else "n/a"
            logger.error(f"Line {line_no}: Firefly rejected transaction (status {status}): {result.detail}")
            return RowOutcome.SUBMIT_FAILED

        self.ledger.record(fingerprint, row)

        sign = "+" if split.type == DEPOSIT else "-"
        logger.info(
            f"Imported {split.type} {sign}{split.amount} {split.currency} "
            f"({split.description or 'no description'}), Firefly id={result.transaction_id}"
        )
        return RowOutcome.PROCESSED
