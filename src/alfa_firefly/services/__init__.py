"""
Import services.

- remote_fingerprints: best-effort fetch of import hashes known to Firefly
- submitter: single-attempt transaction submission
- importer: the row-by-row import pipeline
"""

from .importer import CsvInputError, ImportPipeline, ImportStats, RowOutcome
from .remote_fingerprints import fetch_remote_fingerprints
from .submitter import RemoteSubmitter, SubmitResult

__all__ = [
    "CsvInputError",
    "ImportPipeline",
    "ImportStats",
    "RowOutcome",
    "RemoteSubmitter",
    "SubmitResult",
    "fetch_remote_fingerprints",
]
