"""
Configuration management (SSOT).

All configuration keys for the importer are defined here. Values come from an
optional YAML file, are overridden by environment variables, and finally by
command-line flags (applied in the runner).

Key invariants:
- Firefly URL, token and both account IDs are required before any row is read
- The input locale is explicit so date parsing never depends on the host
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .schemas.firefly_payload import SUPPORTED_LOCALES, parse_timezone

DEFAULT_DEPOSIT_TYPE = "Пополнение"
DEFAULT_COMPLETED_STATUS = "Выполнен"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass
class FireflyConfig:
    """Firefly III connection and submission settings."""

    base_url: str = ""
    token: str = ""
    # Asset account the export belongs to
    bank_account_id: str = ""
    # Counterparty for every imported row (cash / expense / revenue account)
    cash_account_id: str = ""
    timeout_seconds: int = 30
    # Page size of the one-shot fetch of recent import hashes
    fetch_limit: int = 1000
    apply_rules: bool = True
    fire_webhooks: bool = True
    error_if_duplicate_hash: bool = False


@dataclass
class CsvConfig:
    """Input file settings."""

    path: Path | None = None
    delimiter: str = ","
    encoding: str = "utf-8"
    # Off by default: lines are split naively on the delimiter
    quoted_fields: bool = False
    locale: str = "ru-RU"
    # IANA name or fixed offset ("+03:00"); None = host local time
    timezone: str | None = None
    deposit_type: str = DEFAULT_DEPOSIT_TYPE
    completed_status: str = DEFAULT_COMPLETED_STATUS


@dataclass
class LedgerConfig:
    """Local ledger settings."""

    db_path: Path = field(default_factory=lambda: Path("transactions.db"))
    # Empty string keeps fingerprints compatible with existing ledgers
    fingerprint_separator: str = ""


@dataclass
class Config:
    """Application configuration (SSOT)."""

    firefly: FireflyConfig = field(default_factory=FireflyConfig)
    csv: CsvConfig = field(default_factory=CsvConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.firefly.base_url:
            errors.append("firefly.base_url is required (--url or FIREFLY_URL)")
        if not self.firefly.token:
            errors.append("firefly.token is required (--token or FIREFLY_TOKEN)")
        if not self.firefly.bank_account_id:
            errors.append(
                "firefly.bank_account_id is required (--bank-account or FIREFLY_BANK_ACCOUNT_ID)"
            )
        if not self.firefly.cash_account_id:
            errors.append(
                "firefly.cash_account_id is required (--cash-account or FIREFLY_CASH_ACCOUNT_ID)"
            )
        if self.csv.path is None:
            errors.append("csv.path is required (--csv)")

        if not self.csv.delimiter:
            errors.append("csv.delimiter must not be empty")
        if self.csv.locale not in SUPPORTED_LOCALES:
            errors.append(
                f"csv.locale '{self.csv.locale}' is not supported "
                f"(known: {', '.join(sorted(SUPPORTED_LOCALES))})"
            )
        if self.csv.timezone:
            try:
                parse_timezone(self.csv.timezone)
            except ValueError as e:
                errors.append(f"csv.timezone: {e}")

        if self.firefly.fetch_limit < 1:
            errors.append("firefly.fetch_limit must be >= 1")
        if self.firefly.timeout_seconds <= 0:
            errors.append("firefly.timeout_seconds must be > 0")

        return errors

    def require_valid(self) -> None:
        """Raise ConfigValidationError if validate() reports anything."""
        errors = self.validate()
        if errors:
            raise ConfigValidationError(errors)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def load_config(config_path: Path | None) -> Config:
    """
    Load configuration from YAML file.

    A missing file is not an error; defaults and environment apply.

    Environment variables override config values:
    - FIREFLY_URL
    - FIREFLY_TOKEN
    - FIREFLY_BANK_ACCOUNT_ID
    - FIREFLY_CASH_ACCOUNT_ID
    - FIREFLY_ERROR_IF_DUPLICATE_HASH (true/false)
    - ALFA_CSV_LOCALE
    - ALFA_CSV_TIMEZONE
    - ALFA_LEDGER_DB
    """
    if config_path is not None and config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Firefly config
    firefly_data = data.get("firefly", {}) or {}
    firefly = FireflyConfig(
        base_url=os.environ.get("FIREFLY_URL", firefly_data.get("base_url", "")) or "",
        token=os.environ.get("FIREFLY_TOKEN", firefly_data.get("token", "")) or "",
        bank_account_id=str(
            os.environ.get("FIREFLY_BANK_ACCOUNT_ID", firefly_data.get("bank_account_id", ""))
            or ""
        ),
        cash_account_id=str(
            os.environ.get("FIREFLY_CASH_ACCOUNT_ID", firefly_data.get("cash_account_id", ""))
            or ""
        ),
        timeout_seconds=int(firefly_data.get("timeout_seconds", 30)),
        fetch_limit=int(firefly_data.get("fetch_limit", 1000)),
        apply_rules=firefly_data.get("apply_rules", True),
        fire_webhooks=firefly_data.get("fire_webhooks", True),
        error_if_duplicate_hash=_env_bool(
            "FIREFLY_ERROR_IF_DUPLICATE_HASH",
            firefly_data.get("error_if_duplicate_hash", False),
        ),
    )

    # CSV config
    csv_data = data.get("csv", {}) or {}
    csv_path = csv_data.get("path")
    csv = CsvConfig(
        path=Path(csv_path) if csv_path else None,
        delimiter=csv_data.get("delimiter", ","),
        encoding=csv_data.get("encoding", "utf-8"),
        quoted_fields=csv_data.get("quoted_fields", False),
        locale=os.environ.get("ALFA_CSV_LOCALE", csv_data.get("locale", "ru-RU")),
        timezone=os.environ.get("ALFA_CSV_TIMEZONE", csv_data.get("timezone")) or None,
        deposit_type=csv_data.get("deposit_type", DEFAULT_DEPOSIT_TYPE),
        completed_status=csv_data.get("completed_status", DEFAULT_COMPLETED_STATUS),
    )

    # Ledger config
    ledger_data = data.get("ledger", {}) or {}
    ledger = LedgerConfig(
        db_path=Path(os.environ.get("ALFA_LEDGER_DB", ledger_data.get("db_path", "transactions.db"))),
        fingerprint_separator=ledger_data.get("fingerprint_separator", ""),
    )

    return Config(firefly=firefly, csv=csv, ledger=ledger)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Alfa-Bank CSV → Firefly III importer configuration
#
# Environment variables override these values:
#   FIREFLY_URL, FIREFLY_TOKEN, FIREFLY_BANK_ACCOUNT_ID, FIREFLY_CASH_ACCOUNT_ID,
#   ALFA_CSV_LOCALE, ALFA_CSV_TIMEZONE, ALFA_LEDGER_DB
# Command-line flags override both.

firefly:
  base_url: "http://localhost:8080"
  token: "YOUR_FIREFLY_TOKEN"
  bank_account_id: ""                      # Asset account of the export
  cash_account_id: ""                      # Counterparty account
  timeout_seconds: 30
  fetch_limit: 1000                        # Recent transactions scanned for import hashes
  apply_rules: true
  fire_webhooks: true
  error_if_duplicate_hash: false           # Let Firefly reject duplicates by hash

csv:
  path: null
  delimiter: ","
  encoding: "utf-8"
  quoted_fields: false                     # true = honour "..." quoting
  locale: "ru-RU"                          # Date format family of the export
  timezone: null                           # e.g. "Europe/Moscow" or "+03:00"; null = host
  deposit_type: "Пополнение"
  completed_status: "Выполнен"

ledger:
  db_path: "transactions.db"
  fingerprint_separator: ""                # "" = compatible with existing ledgers
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(default_config)
