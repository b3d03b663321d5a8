"""
Eligibility rule for export rows.

Deposits are treated as settled as soon as they appear in the export. Every
other row must carry the exact "completed" status, which keeps pending and
cancelled card operations out of the ledger.
"""

from .csv_row import Row

DATE_COLUMN = "transactionDate"
TYPE_COLUMN = "type"
STATUS_COLUMN = "status"


class RowFilter:
    """Decides whether a row may be submitted."""

    def __init__(self, deposit_type: str = "Пополнение", completed_status: str = "Выполнен"):
        self.deposit_type = deposit_type
        self.completed_status = completed_status

    def is_deposit(self, row: Row) -> bool:
        """Type column matches the deposit sentinel (case-insensitive)."""
        row_type = row.get(TYPE_COLUMN)
        if row_type is None:
            return False
        return row_type.casefold() == self.deposit_type.casefold()

    def is_eligible(self, row: Row) -> bool:
        """A row needs a date, and must be a deposit or exactly completed."""
        if not row.get(DATE_COLUMN):
            return False
        if self.is_deposit(row):
            return True
        return row.get(STATUS_COLUMN) == self.completed_status
