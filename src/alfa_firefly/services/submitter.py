"""
Transaction submission.

One POST per row, no retry. Anything but a 2xx is reported back as a failed
result; wrap RemoteSubmitter if eventual delivery is needed.
"""

import logging
from dataclasses import dataclass

from ..firefly_client import FireflyAPIError, FireflyClient, FireflyError
from ..schemas.firefly_payload import FireflyTransactionStore

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    """Outcome of a single submission."""

    success: bool
    transaction_id: str | None = None
    status_code: int | None = None
    detail: str | None = None


class RemoteSubmitter:
    """Submits transaction stores to Firefly III."""

    def __init__(self, client: FireflyClient):
        self.client = client

    def submit(self, payload: FireflyTransactionStore) -> SubmitResult:
        """Submit one payload and report the outcome."""
        try:
            transaction_id = self.client.create_transaction(payload)
        except FireflyAPIError as e:
            return SubmitResult(
                success=False,
                status_code=e.status_code,
                detail=e.response_body or str(e),
            )
        except FireflyError as e:
            return SubmitResult(success=False, detail=str(e))

        return SubmitResult(success=True, transaction_id=transaction_id)
