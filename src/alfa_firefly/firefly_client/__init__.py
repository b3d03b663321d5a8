"""
Firefly III API Client.

Provides:
- Create transactions (POST /api/v1/transactions)
- List recent transactions with their import hashes

Treats Firefly errors as loud failures with actionable messages.
"""

from .client import (
    FireflyAPIError,
    FireflyClient,
    FireflyConnectionError,
    FireflyError,
    FireflyTransaction,
)

__all__ = [
    "FireflyClient",
    "FireflyError",
    "FireflyAPIError",
    "FireflyConnectionError",
    "FireflyTransaction",
]
