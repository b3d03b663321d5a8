"""
Remote fingerprint bootstrap.

Collects the import hashes of Firefly's most recent transactions so rows
already present remotely (lost local ledger, manual entry, another importer)
are not posted again. The window is only the latest ``limit`` transactions;
it backs up the local ledger and never replaces it.
"""

import logging

from ..firefly_client import FireflyClient, FireflyError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 1000


def fetch_remote_fingerprints(client: FireflyClient, limit: int = DEFAULT_FETCH_LIMIT) -> set[str]:
    """
    Fetch the set of import hashes known to Firefly.

    Any failure (connection, non-2xx, malformed body) yields an empty set and
    a warning; the import then relies on the local ledger alone.
    """
    try:
        transactions = client.list_recent_transactions(limit=limit)
    except FireflyError as e:
        logger.warning(f"Could not fetch existing Firefly transactions, continuing without: {e}")
        return set()
    except (ValueError, TypeError) as e:
        logger.warning(f"Unexpected Firefly transactions response, continuing without: {e}")
        return set()

    fingerprints = {tx.import_hash_v2 for tx in transactions if tx.import_hash_v2}
    logger.info(
        f"Loaded {len(fingerprints)} import hashes from {len(transactions)} recent Firefly splits"
    )
    return fingerprints
