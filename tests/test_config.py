"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from alfa_firefly.config import (
    Config,
    ConfigValidationError,
    CsvConfig,
    FireflyConfig,
    create_default_config,
    load_config,
)


def valid_config(tmp_path) -> Config:
    return Config(
        firefly=FireflyConfig(
            base_url="http://firefly.test",
            token="token",
            bank_account_id="1",
            cash_account_id="2",
        ),
        csv=CsvConfig(path=tmp_path / "export.csv"),
    )


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config.firefly.base_url == ""
        assert config.csv.locale == "ru-RU"
        assert config.csv.delimiter == ","
        assert config.csv.quoted_fields is False
        assert config.csv.deposit_type == "Пополнение"
        assert config.csv.completed_status == "Выполнен"
        assert config.ledger.db_path == Path("transactions.db")
        assert config.ledger.fingerprint_separator == ""

    def test_none_path(self):
        config = load_config(None)
        assert config.firefly.fetch_limit == 1000

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            """
firefly:
  base_url: "http://firefly.local"
  token: "abc"
  bank_account_id: 5
  cash_account_id: "6"
  fetch_limit: 200
  apply_rules: false
csv:
  path: "export.csv"
  delimiter: ";"
  quoted_fields: true
  timezone: "+03:00"
ledger:
  db_path: "data/ledger.db"
""",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.firefly.base_url == "http://firefly.local"
        assert config.firefly.bank_account_id == "5"
        assert config.firefly.cash_account_id == "6"
        assert config.firefly.fetch_limit == 200
        assert config.firefly.apply_rules is False
        assert config.csv.path == Path("export.csv")
        assert config.csv.delimiter == ";"
        assert config.csv.quoted_fields is True
        assert config.csv.timezone == "+03:00"
        assert config.ledger.db_path == Path("data/ledger.db")

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text('firefly:\n  base_url: "http://from-file"\n', encoding="utf-8")
        monkeypatch.setenv("FIREFLY_URL", "http://from-env")
        monkeypatch.setenv("FIREFLY_TOKEN", "env-token")
        monkeypatch.setenv("FIREFLY_BANK_ACCOUNT_ID", "11")
        monkeypatch.setenv("FIREFLY_CASH_ACCOUNT_ID", "12")
        monkeypatch.setenv("FIREFLY_ERROR_IF_DUPLICATE_HASH", "true")
        monkeypatch.setenv("ALFA_CSV_LOCALE", "en-US")
        monkeypatch.setenv("ALFA_LEDGER_DB", str(tmp_path / "env.db"))

        config = load_config(path)

        assert config.firefly.base_url == "http://from-env"
        assert config.firefly.token == "env-token"
        assert config.firefly.bank_account_id == "11"
        assert config.firefly.cash_account_id == "12"
        assert config.firefly.error_if_duplicate_hash is True
        assert config.csv.locale == "en-US"
        assert config.ledger.db_path == tmp_path / "env.db"

    def test_default_config_file_loads(self, tmp_path):
        path = tmp_path / "sub" / "config.yaml"
        create_default_config(path)

        config = load_config(path)

        assert config.firefly.base_url == "http://localhost:8080"
        assert config.firefly.token == "YOUR_FIREFLY_TOKEN"
        assert config.csv.deposit_type == "Пополнение"
        assert config.csv.timezone is None
        assert config.csv.path is None


class TestValidate:
    """Tests for Config.validate."""

    def test_valid(self, tmp_path):
        assert valid_config(tmp_path).validate() == []

    def test_empty_config_reports_every_required_value(self):
        errors = Config().validate()
        joined = " ".join(errors)

        assert "firefly.base_url" in joined
        assert "firefly.token" in joined
        assert "firefly.bank_account_id" in joined
        assert "firefly.cash_account_id" in joined
        assert "csv.path" in joined

    def test_unknown_locale(self, tmp_path):
        config = valid_config(tmp_path)
        config.csv.locale = "xx-XX"
        assert any("csv.locale" in e for e in config.validate())

    def test_bad_timezone(self, tmp_path):
        config = valid_config(tmp_path)
        config.csv.timezone = "Nowhere/Special"
        assert any("csv.timezone" in e for e in config.validate())

    def test_offset_timezone_accepted(self, tmp_path):
        config = valid_config(tmp_path)
        config.csv.timezone = "+03:00"
        assert config.validate() == []

    def test_bad_limits(self, tmp_path):
        config = valid_config(tmp_path)
        config.firefly.fetch_limit = 0
        config.firefly.timeout_seconds = 0
        assert len(config.validate()) == 2

    def test_require_valid_raises(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            Config().require_valid()
        assert len(exc_info.value.errors) >= 4
