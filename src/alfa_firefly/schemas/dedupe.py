"""
Row fingerprints (CRITICAL).

The fingerprint is the idempotency key shared by the local ledger and the
remote import-hash set. It is an MD5 hex digest over the row's raw field
values in header order.

Legacy mode (separator="") concatenates values without a separator. This is
what existing ledgers were written with, so it stays the default, but it is
collision-prone: ("1", "23") and ("12", "3") produce the same digest. Pass a
separator that cannot occur in field values (e.g. "\\x1f") to harden it; doing
so changes every fingerprint, so an existing ledger no longer matches.

The source file is trusted, so MD5's weakness against crafted collisions is
irrelevant here.
"""

import hashlib
from collections.abc import Iterable

# Length of a fingerprint (hex MD5)
FINGERPRINT_LENGTH = 32

# Suggested separator for hardened fingerprints (ASCII unit separator)
UNIT_SEPARATOR = "\x1f"


def compute_row_fingerprint(values: Iterable[str], separator: str = "") -> str:
    """
    Compute the fingerprint of a row.

    Args:
        values: Field values in header order
        separator: String placed between values before hashing

    Returns:
        32-character lowercase hex digest

    Examples:
        >>> compute_row_fingerprint(["a", "b"]) == compute_row_fingerprint(["ab"])
        True
        >>> compute_row_fingerprint(["a", "b"], "\\x1f") == compute_row_fingerprint(["ab"], "\\x1f")
        False
    """
    canonical = separator.join(values)
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()

