"""
Firefly III API client implementation.
"""

import json
import logging
from dataclasses import dataclass

import requests

from ..schemas.firefly_payload import FireflyTransactionStore

logger = logging.getLogger(__name__)

# Firefly III requires this media type on write calls
JSON_API_MEDIA_TYPE = "application/vnd.api+json"


class FireflyError(Exception):
    """Base exception for Firefly client errors."""

    pass


class FireflyAPIError(FireflyError):
    """API returned an error response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_body: str | None = None,
        errors: dict | None = None,
    ):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        self.errors = errors or {}

        # Build detailed error message
        error_details = []
        if errors:
            for field, msgs in errors.items():
                if isinstance(msgs, list):
                    error_details.extend([f"{field}: {m}" for m in msgs])
                else:
                    error_details.append(f"{field}: {msgs}")

        detail_str = "; ".join(error_details) if error_details else message
        super().__init__(f"Firefly API error {status_code}: {detail_str}")


class FireflyConnectionError(FireflyError):
    """Failed to connect to Firefly."""

    pass


@dataclass
class FireflyTransaction:
    """One split of a Firefly transaction group, as far as the importer needs it."""

    id: str
    import_hash_v2: str | None = None


class FireflyClient:
    """
    Client for Firefly III API.

    Every call is a single attempt: there is no retry adapter, so a failed
    POST is never re-sent behind the caller's back.
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Firefly client.

        Args:
            base_url: Firefly III URL (e.g., "http://192.168.1.138:8081")
            token: Personal access token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
        headers: dict | None = None,
    ) -> requests.Response:
        """Make an API request with error handling."""
        url = f"{self.base_url}{endpoint}"

        logger.debug(f"API Request: {method} {url}")
        if json_data:
            logger.debug(f"Request body: {json.dumps(json_data, indent=2, ensure_ascii=False)}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise FireflyConnectionError(
                f"Failed to connect to Firefly at {self.base_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise FireflyConnectionError(f"Request to Firefly timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise FireflyError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            error_body = response.text
            errors = {}

            try:
                error_json = response.json()
                errors = error_json.get("errors", {}) or {}
                message = error_json.get("message", response.reason)
            except (ValueError, AttributeError):
                message = response.reason

            logger.debug(f"Full response body: {error_body}")

            raise FireflyAPIError(
                status_code=response.status_code,
                message=message,
                response_body=error_body,
                errors=errors if isinstance(errors, dict) else {},
            )

        return response

    def create_transaction(self, payload: FireflyTransactionStore) -> str | None:
        """
        Create a transaction in Firefly III.

        Args:
            payload: Transaction store payload

        Returns:
            Firefly transaction group ID, or None if the response carries none

        Raises:
            FireflyAPIError: If API returns an error
            FireflyConnectionError: If Firefly cannot be reached
            ValueError: If payload has no splits
        """
        if not payload.transactions:
            raise ValueError("Invalid payload: transactions must not be empty")

        response = self._request(
            "POST",
            "/api/v1/transactions",
            json_data=payload.to_dict(),
            headers={"Accept": JSON_API_MEDIA_TYPE},
        )

        try:
            transaction_id = response.json().get("data", {}).get("id")
        except (ValueError, AttributeError):
            transaction_id = None

        if transaction_id:
            logger.debug(f"Created Firefly transaction id={transaction_id}")

        return str(transaction_id) if transaction_id else None

    def list_recent_transactions(self, limit: int = 1000) -> list[FireflyTransaction]:
        """
        List the most recent transactions (single page).

        Split transactions are returned one entry per split, each carrying the
        group ID, so every import hash Firefly knows about is visible.

        Args:
            limit: Page size requested from Firefly

        Raises:
            FireflyError: On transport or API errors
            ValueError: If the response is not the expected JSON document
        """
        response = self._request("GET", "/api/v1/transactions", params={"limit": limit})
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected transactions response: not a JSON object")

        transactions = []
        for item in data.get("data", []) or []:
            if not isinstance(item, dict):
                continue
            attrs = item.get("attributes", {}) or {}
            for tx in attrs.get("transactions", []) or []:
                if not isinstance(tx, dict):
                    continue
                import_hash = tx.get("import_hash_v2")
                transactions.append(
                    FireflyTransaction(
                        id=str(item.get("id", "")),
                        import_hash_v2=import_hash if isinstance(import_hash, str) else None,
                    )
                )

        return transactions
