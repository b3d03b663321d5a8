"""
Row parsing for bank CSV exports.

A row is a mapping of trimmed column name → trimmed field value, built by
zipping the header with the split line. Fields beyond the header are dropped;
trailing columns missing from the line are absent from the mapping.

By default a line is split naively on the delimiter, so a quoted field that
contains the delimiter is split as well. Set quoted_fields=True to use the
csv module's quote-aware reader instead.
"""

import csv
from collections.abc import Mapping

Row = Mapping[str, str]

BOM = "\ufeff"


def split_line(line: str, delimiter: str = ",", quoted_fields: bool = False) -> list[str]:
    """Split a single line into raw (untrimmed) fields."""
    line = line.rstrip("\r\n")
    if quoted_fields:
        return next(csv.reader([line], delimiter=delimiter), [])
    return line.split(delimiter)


class RowParser:
    """Turns data lines into rows keyed by the header's column names."""

    def __init__(self, header_line: str, delimiter: str = ",", quoted_fields: bool = False):
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self.delimiter = delimiter
        self.quoted_fields = quoted_fields
        header_line = header_line.lstrip(BOM)
        self._columns = [
            name.strip() for name in split_line(header_line, delimiter, quoted_fields)
        ]

    @property
    def columns(self) -> list[str]:
        """Column names in header order."""
        return list(self._columns)

    def parse(self, line: str) -> dict[str, str]:
        """Parse one data line into a row."""
        fields = split_line(line, self.delimiter, self.quoted_fields)
        return {name: value.strip() for name, value in zip(self._columns, fields)}
