"""
Firefly III transaction payload builder (SSOT).

This is THE single mapping from an eligible export row to the Firefly
TransactionStore JSON.

Rules:
- date is parsed with the configured locale's formats, naive values are
  pinned to the configured timezone, output is ISO-8601 with offset
- amount accepts decimal comma, is made positive and rounded to cents
- deposit rows flow cash → bank, everything else bank → cash
- merchant, currency and category default to "" and never fail a row
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .csv_row import Row

CURRENCY_PRECISION = Decimal("0.01")

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"

# Date/time layouts per input locale, tried in order
DATE_FORMATS: dict[str, list[str]] = {
    "ru-RU": [
        "%d.%m.%Y %H:%M:%S",
        "%d.%m.%Y %H:%M",
        "%d.%m.%Y",
        "%d.%m.%y %H:%M:%S",
        "%d.%m.%y %H:%M",
        "%d.%m.%y",
    ],
    "de-DE": [
        "%d.%m.%Y %H:%M:%S",
        "%d.%m.%Y %H:%M",
        "%d.%m.%Y",
    ],
    "en-US": [
        "%m/%d/%Y %I:%M:%S %p",
        "%m/%d/%Y %I:%M %p",
        "%m/%d/%Y %H:%M:%S",
        "%m/%d/%Y %H:%M",
        "%m/%d/%Y",
    ],
    "en-GB": [
        "%d/%m/%Y %H:%M:%S",
        "%d/%m/%Y %H:%M",
        "%d/%m/%Y",
    ],
    "invariant": [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%d",
    ],
}

SUPPORTED_LOCALES = frozenset(DATE_FORMATS)

_OFFSET_RE = re.compile(r"^(?:UTC)?([+-])(\d{1,2}):?(\d{2})?$")


class TransformError(ValueError):
    """Row could not be mapped to a Firefly transaction."""

    def __init__(self, field_name: str, value: str | None, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field_name} '{value}': {reason}")


def parse_timezone(name: str) -> tzinfo:
    """
    Resolve a timezone setting.

    Accepts "UTC", a fixed offset like "+03:00" / "-0530", or an IANA name.

    Raises:
        ValueError: If the value is not a known timezone
    """
    name = name.strip()
    if name.upper() in ("UTC", "Z"):
        return timezone.utc

    match = _OFFSET_RE.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if delta >= timedelta(hours=24):
            raise ValueError(f"offset out of range: {name}")
        return timezone(-delta if sign == "-" else delta)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone: {name}") from e


def parse_row_date(value: str, locale: str = "ru-RU", tz: tzinfo | None = None) -> str:
    """
    Parse an export date and return it as ISO-8601 with offset.

    Naive values are interpreted in ``tz`` (host local time when None).

    Raises:
        TransformError: If no known layout matches
    """
    if locale not in DATE_FORMATS:
        raise TransformError("transactionDate", value, f"unsupported locale {locale}")

    text = value.strip()
    parsed: datetime | None = None

    for fmt in DATE_FORMATS[locale]:
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue

    if parsed is None:
        # ISO input is accepted in every locale
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise TransformError("transactionDate", value, "unrecognised date format") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()

    return parsed.isoformat(timespec="seconds")


def parse_amount(value: str | None) -> Decimal:
    """
    Parse an export amount into a positive Decimal rounded to cents.

    "1 234,56", "1234,56" and "-1234.56" all become Decimal("1234.56").

    Raises:
        TransformError: If the value is missing or not numeric
    """
    if value is None or not value.strip():
        raise TransformError("amount", value, "amount is missing")

    normalized = re.sub(r"\s", "", value).replace(",", ".")
    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        raise TransformError("amount", value, "not a number") from None

    if not amount.is_finite():
        raise TransformError("amount", value, "not a finite number")

    try:
        return abs(amount).quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise TransformError("amount", value, "out of range") from None


@dataclass
class FireflyTransactionSplit:
    """
    Single transaction split for Firefly III API.

    Maps to TransactionSplitStore in Firefly API.
    """

    # Required fields
    type: str  # withdrawal, deposit
    date: str  # ISO-8601 with offset
    amount: str  # Decimal string with dot
    description: str

    # Account mapping
    source_id: str | None = None
    destination_id: str | None = None

    currency: str = ""
    category_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to Firefly API JSON format."""
        result: dict[str, Any] = {
            "date": self.date,
            "type": self.type,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency,
            "source_id": self.source_id,
            "destination_id": self.destination_id,
            "category_name": self.category_name,
        }

        # Firefly reads the ISO code from currency_code
        if self.currency:
            result["currency_code"] = self.currency

        return result


@dataclass
class FireflyTransactionStore:
    """
    Root transaction store for Firefly III API.

    Maps to TransactionStore in Firefly API.
    """

    transactions: list[FireflyTransactionSplit] = field(default_factory=list)

    apply_rules: bool = True
    fire_webhooks: bool = True
    error_if_duplicate_hash: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to Firefly API JSON format."""
        result: dict[str, Any] = {
            "apply_rules": self.apply_rules,
            "fire_webhooks": self.fire_webhooks,
            "transactions": [t.to_dict() for t in self.transactions],
        }

        if self.error_if_duplicate_hash:
            result["error_if_duplicate_hash"] = True

        return result


class TransactionTransformer:
    """Maps eligible rows to Firefly transaction splits."""

    def __init__(
        self,
        bank_account_id: str,
        cash_account_id: str,
        locale: str = "ru-RU",
        tz: tzinfo | None = None,
        deposit_type: str = "Пополнение",
    ):
        """
        Args:
            bank_account_id: Firefly asset account of the export
            cash_account_id: Firefly counterparty account
            locale: Key of DATE_FORMATS used to read transactionDate
            tz: Timezone for naive dates (host local time when None)
            deposit_type: Value of the type column that marks a deposit
        """
        if locale not in DATE_FORMATS:
            raise ValueError(f"Unsupported locale: {locale}")
        self.bank_account_id = bank_account_id
        self.cash_account_id = cash_account_id
        self.locale = locale
        self.tz = tz
        self.deposit_type = deposit_type

    def direction(self, row: Row) -> str:
        """Return "deposit" or "withdrawal" for a row."""
        row_type = row.get("type") or ""
        if row_type.casefold() == self.deposit_type.casefold():
            return DEPOSIT
        return WITHDRAWAL

    def transform(self, row: Row) -> FireflyTransactionSplit:
        """
        Build the outbound split for a row.

        Raises:
            TransformError: If date or amount cannot be parsed
        """
        date = parse_row_date(row.get("transactionDate", ""), self.locale, self.tz)
        amount = parse_amount(row.get("amount"))
        txn_type = self.direction(row)

        if txn_type == WITHDRAWAL:
            source_id, destination_id = self.bank_account_id, self.cash_account_id
        else:
            source_id, destination_id = self.cash_account_id, self.bank_account_id

        return FireflyTransactionSplit(
            type=txn_type,
            date=date,
            amount=str(amount),
            description=row.get("merchant", ""),
            source_id=source_id,
            destination_id=destination_id,
            currency=row.get("currency", ""),
            category_name=row.get("category", ""),
        )


def build_transaction_store(
    split: FireflyTransactionSplit,
    apply_rules: bool = True,
    fire_webhooks: bool = True,
    error_if_duplicate_hash: bool = False,
) -> FireflyTransactionStore:
    """Wrap a single split into a store payload."""
    return FireflyTransactionStore(
        transactions=[split],
        apply_rules=apply_rules,
        fire_webhooks=fire_webhooks,
        error_if_duplicate_hash=error_if_duplicate_hash,
    )
