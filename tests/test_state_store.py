"""Tests for the SQLite ledger."""

import json
import sqlite3

import pytest

from alfa_firefly.state_store import LedgerEntry, LedgerStore
from alfa_firefly.state_store.migrations import (
    LedgerMigration,
    MigrationRunner,
    discover_migrations,
)

ROW = {"transactionDate": "01.01.2024 10:00", "amount": "1500.00", "type": "Пополнение"}
FINGERPRINT = "0123456789abcdef0123456789abcdef"


class TestLedgerStore:
    """Tests for LedgerStore."""

    @pytest.fixture
    def store(self, temp_db):
        return LedgerStore(temp_db)

    def test_init_creates_db(self, temp_db):
        """Initializing creates database file."""
        LedgerStore(temp_db)
        assert temp_db.exists()

    def test_init_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "ledger.db"
        LedgerStore(path)
        assert path.exists()

    def test_init_is_idempotent(self, temp_db):
        LedgerStore(temp_db).record(FINGERPRINT, ROW)
        store = LedgerStore(temp_db)
        assert store.exists(FINGERPRINT)
        assert store.count() == 1

    def test_init_creates_tables(self, store):
        conn = store._get_connection()
        try:
            tables = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
            table_names = [t[0] for t in tables]
            columns = {row[1] for row in conn.execute("PRAGMA table_info(transactions)")}
        finally:
            conn.close()

        assert "transactions" in table_names
        assert "migrations" in table_names
        assert columns == {"id", "data", "recorded_at"}

    def test_exists_false_for_unknown(self, store):
        assert store.exists(FINGERPRINT) is False

    def test_record_then_exists(self, store):
        store.record(FINGERPRINT, ROW)
        assert store.exists(FINGERPRINT) is True

    def test_get_returns_entry(self, store):
        store.record(FINGERPRINT, ROW)

        entry = store.get(FINGERPRINT)

        assert isinstance(entry, LedgerEntry)
        assert entry.fingerprint == FINGERPRINT
        assert entry.row == ROW
        assert entry.recorded_at is not None
        assert entry.recorded_at.endswith("Z")

    def test_get_unknown_returns_none(self, store):
        assert store.get(FINGERPRINT) is None

    def test_row_stored_as_json(self, store):
        store.record(FINGERPRINT, ROW)
        conn = store._get_connection()
        try:
            data = conn.execute("SELECT data FROM transactions WHERE id = ?", (FINGERPRINT,)).fetchone()[0]
        finally:
            conn.close()

        assert json.loads(data) == ROW

    def test_record_twice_raises(self, store):
        """Entries are written once and never overwritten."""
        store.record(FINGERPRINT, ROW)
        with pytest.raises(sqlite3.IntegrityError):
            store.record(FINGERPRINT, {"other": "row"})
        assert store.get(FINGERPRINT).row == ROW

    def test_count_and_last_recorded(self, store):
        assert store.count() == 0
        assert store.last_recorded_at() is None

        store.record(FINGERPRINT, ROW)
        store.record("f" * 32, ROW)

        assert store.count() == 2
        assert store.last_recorded_at() is not None


class TestLegacyLedger:
    """Ledgers written before the recorded_at column existed."""

    @pytest.fixture
    def legacy_db(self, temp_db):
        conn = sqlite3.connect(str(temp_db))
        conn.execute("CREATE TABLE transactions (id TEXT PRIMARY KEY, data TEXT NOT NULL)")
        conn.execute(
            "INSERT INTO transactions (id, data) VALUES (?, ?)",
            (FINGERPRINT, json.dumps(ROW)),
        )
        conn.commit()
        conn.close()
        return temp_db

    def test_existing_entries_still_deduplicate(self, legacy_db):
        store = LedgerStore(legacy_db)
        assert store.exists(FINGERPRINT)

    def test_existing_entries_have_no_timestamp(self, legacy_db):
        entry = LedgerStore(legacy_db).get(FINGERPRINT)
        assert entry.row == ROW
        assert entry.recorded_at is None

    def test_new_entries_recorded(self, legacy_db):
        store = LedgerStore(legacy_db)
        store.record("a" * 32, ROW)
        assert store.count() == 2


class TestMigrations:
    """Tests for the migration runner."""

    def test_discovered_in_version_order(self):
        migrations = discover_migrations()
        assert [m.version for m in migrations] == sorted(m.version for m in migrations)
        assert migrations[0].version == 1
        assert migrations[0].name == "recorded_at"

    def test_run_pending_is_idempotent(self, temp_db):
        LedgerStore(temp_db)
        conn = sqlite3.connect(str(temp_db))
        try:
            runner = MigrationRunner(conn)
            assert runner.run_pending() == []
            assert runner.get_applied_versions() == {m.version for m in discover_migrations()}
        finally:
            conn.close()

    def test_upgrades_unmigrated_ledger(self, temp_db):
        LedgerStore(temp_db, run_migrations=False)
        conn = sqlite3.connect(str(temp_db))
        try:
            assert MigrationRunner(conn).run_pending() == [1]
            columns = {row[1] for row in conn.execute("PRAGMA table_info(transactions)")}
        finally:
            conn.close()
        assert "recorded_at" in columns

    def test_failed_upgrade_not_recorded(self, temp_db):
        def broken(conn):
            conn.execute("ALTER TABLE no_such_table ADD COLUMN x TEXT")

        LedgerStore(temp_db)
        conn = sqlite3.connect(str(temp_db))
        try:
            runner = MigrationRunner(conn)
            with pytest.raises(sqlite3.OperationalError):
                runner.apply(LedgerMigration(99, "broken", broken))
            assert 99 not in runner.get_applied_versions()
        finally:
            conn.close()

    def test_without_migrations_schema_is_base_table(self, temp_db):
        store = LedgerStore(temp_db, run_migrations=False)
        conn = store._get_connection()
        try:
            columns = {row[1] for row in conn.execute("PRAGMA table_info(transactions)")}
        finally:
            conn.close()
        assert columns == {"id", "data"}
