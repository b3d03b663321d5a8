"""
CLI main entry point.
"""

import argparse
import logging
import sqlite3
import sys
from pathlib import Path

import yaml

from ..config import Config, ConfigValidationError, create_default_config, load_config
from ..firefly_client import FireflyClient
from ..schemas.firefly_payload import TransactionTransformer, parse_timezone
from ..schemas.row_filter import RowFilter
from ..services import (
    CsvInputError,
    ImportPipeline,
    RemoteSubmitter,
    RowOutcome,
    fetch_remote_fingerprints,
)
from ..state_store import LedgerStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_STORAGE = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Keep connection chatter out of normal runs
    if not verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="alfa-firefly",
        description="Import bank CSV transactions into Firefly III via API",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml, optional)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # import command
    import_parser = subparsers.add_parser(
        "import", help="Import a CSV export into Firefly III"
    )
    import_parser.add_argument("--csv", type=Path, help="Path to CSV file")
    import_parser.add_argument(
        "-d", "--db", type=Path, help="SQLite ledger file (default: transactions.db)"
    )
    import_parser.add_argument("-u", "--url", type=str, help="Firefly API base URL (FIREFLY_URL)")
    import_parser.add_argument("-t", "--token", type=str, help="Firefly API token (FIREFLY_TOKEN)")
    import_parser.add_argument(
        "-b",
        "--bank-account",
        type=str,
        help="Firefly bank account ID (FIREFLY_BANK_ACCOUNT_ID)",
    )
    import_parser.add_argument(
        "--cash-account",
        type=str,
        help="Firefly cash account ID (FIREFLY_CASH_ACCOUNT_ID)",
    )
    import_parser.add_argument("--locale", type=str, help="Date locale of the export (default: ru-RU)")
    import_parser.add_argument(
        "--timezone",
        type=str,
        help="Timezone of export dates, IANA name or offset (default: host local time)",
    )
    import_parser.add_argument("--delimiter", type=str, help="Field delimiter (default: ',')")
    import_parser.add_argument(
        "--quoted-fields",
        action="store_true",
        default=None,
        help="Honour double-quoted fields instead of splitting naively",
    )

    # status command
    status_parser = subparsers.add_parser("status", help="Show ledger statistics")
    status_parser.add_argument("-d", "--db", type=Path, help="SQLite ledger file")

    # init-config command
    subparsers.add_parser("init-config", help="Write a default config file")

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line flags on top of file/environment configuration."""
    overrides = [
        (config.csv, "path", getattr(args, "csv", None)),
        (config.ledger, "db_path", getattr(args, "db", None)),
        (config.firefly, "base_url", getattr(args, "url", None)),
        (config.firefly, "token", getattr(args, "token", None)),
        (config.firefly, "bank_account_id", getattr(args, "bank_account", None)),
        (config.firefly, "cash_account_id", getattr(args, "cash_account", None)),
        (config.csv, "locale", getattr(args, "locale", None)),
        (config.csv, "timezone", getattr(args, "timezone", None)),
        (config.csv, "delimiter", getattr(args, "delimiter", None)),
        (config.csv, "quoted_fields", getattr(args, "quoted_fields", None)),
    ]
    for section, attr, value in overrides:
        if value is not None:
            setattr(section, attr, value)
    return config


def build_pipeline(config: Config, client: FireflyClient, ledger: LedgerStore) -> ImportPipeline:
    """Wire the pipeline components from configuration."""
    tz = parse_timezone(config.csv.timezone) if config.csv.timezone else None
    remote_fingerprints = fetch_remote_fingerprints(client, limit=config.firefly.fetch_limit)

    return ImportPipeline(
        ledger=ledger,
        row_filter=RowFilter(
            deposit_type=config.csv.deposit_type,
            completed_status=config.csv.completed_status,
        ),
        transformer=TransactionTransformer(
            bank_account_id=config.firefly.bank_account_id,
            cash_account_id=config.firefly.cash_account_id,
            locale=config.csv.locale,
            tz=tz,
            deposit_type=config.csv.deposit_type,
        ),
        submitter=RemoteSubmitter(client),
        remote_fingerprints=remote_fingerprints,
        delimiter=config.csv.delimiter,
        quoted_fields=config.csv.quoted_fields,
        fingerprint_separator=config.ledger.fingerprint_separator,
        apply_rules=config.firefly.apply_rules,
        fire_webhooks=config.firefly.fire_webhooks,
        error_if_duplicate_hash=config.firefly.error_if_duplicate_hash,
    )


def cmd_import(config: Config) -> int:
    """Import a CSV export into Firefly III."""
    try:
        config.require_valid()
    except ConfigValidationError as e:
        print("❌ Configuration error:", file=sys.stderr)
        for error in e.errors:
            print(f"   - {error}", file=sys.stderr)
        return EXIT_USAGE

    csv_path = config.csv.path
    if not csv_path.is_file():
        print(f"❌ CSV file not found: {csv_path}", file=sys.stderr)
        return EXIT_USAGE

    print(f"📤 Importing {csv_path} into Firefly III...")

    try:
        ledger = LedgerStore(config.ledger.db_path)
        client = FireflyClient(
            base_url=config.firefly.base_url,
            token=config.firefly.token,
            timeout=config.firefly.timeout_seconds,
        )
        pipeline = build_pipeline(config, client, ledger)
        stats = pipeline.run_file(csv_path, encoding=config.csv.encoding)
    except CsvInputError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_USAGE
    except sqlite3.Error as e:
        logger.exception("Ledger storage failure")
        print(f"❌ Ledger error, import aborted: {e}", file=sys.stderr)
        return EXIT_STORAGE

    if stats.skipped:
        logger.info(
            f"Skipped: {stats.outcomes[RowOutcome.FILTERED]} not eligible, "
            f"{stats.outcomes[RowOutcome.DUPLICATE]} duplicates, "
            f"{stats.outcomes[RowOutcome.TRANSFORM_FAILED]} invalid, "
            f"{stats.outcomes[RowOutcome.SUBMIT_FAILED]} rejected by Firefly"
        )
    print(f"Done. Processed: {stats.processed}, Skipped: {stats.skipped}")
    return EXIT_OK


def cmd_status(config: Config) -> int:
    """Show ledger statistics."""
    db_path = config.ledger.db_path
    if not db_path.exists():
        print(f"No ledger at {db_path} yet")
        return EXIT_OK

    try:
        ledger = LedgerStore(db_path)
        count = ledger.count()
        last = ledger.last_recorded_at()
    except sqlite3.Error as e:
        print(f"❌ Ledger error: {e}", file=sys.stderr)
        return EXIT_STORAGE

    print(f"📊 Ledger: {db_path}")
    print(f"   Imported rows: {count}")
    print(f"   Last import:   {last or 'unknown'}")
    return EXIT_OK


def cmd_init_config(config_path: Path) -> int:
    """Write a default configuration file."""
    if config_path.exists():
        print(f"❌ {config_path} already exists", file=sys.stderr)
        return EXIT_USAGE
    create_default_config(config_path)
    print(f"✅ Wrote {config_path}")
    return EXIT_OK


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return EXIT_USAGE

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"❌ Failed to load config: {e}", file=sys.stderr)
        return EXIT_USAGE
    config = apply_overrides(config, parsed)

    # Route to command
    if parsed.command == "import":
        return cmd_import(config)
    elif parsed.command == "status":
        return cmd_status(config)
    else:
        parser.print_help()
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
