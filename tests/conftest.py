"""Test fixtures and utilities."""

from pathlib import Path

import pytest

BASE_URL = "http://firefly.test:8080"
TOKEN = "test-token-12345"
BANK_ACCOUNT_ID = "1"
CASH_ACCOUNT_ID = "2"

HEADER = "transactionDate,amount,type,status,merchant,currency,category"

# Alfa-Bank style export rows (naive comma split, dot decimals)
SAMPLE_CSV = """transactionDate,amount,type,status,merchant,currency,category
01.01.2024 10:00,1500.00,Пополнение,,ACME,RUB,Salary
02.01.2024 12:30,250.50,Покупка,Выполнен,Pyaterochka,RUB,Food
03.01.2024 09:15,99.90,Покупка,В обработке,Yandex Taxi,RUB,Transport
,10.00,Покупка,Выполнен,Ghost,RUB,Misc
"""

FIREFLY_ENV_VARS = [
    "FIREFLY_URL",
    "FIREFLY_TOKEN",
    "FIREFLY_BANK_ACCOUNT_ID",
    "FIREFLY_CASH_ACCOUNT_ID",
    "FIREFLY_ERROR_IF_DUPLICATE_HASH",
    "ALFA_CSV_LOCALE",
    "ALFA_CSV_TIMEZONE",
    "ALFA_LEDGER_DB",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host configuration out of the tests."""
    for name in FIREFLY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Temporary ledger path for testing."""
    return tmp_path / "test_ledger.db"


@pytest.fixture
def sample_csv(tmp_path) -> Path:
    """Sample export written to disk."""
    path = tmp_path / "export.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


def transactions_list_response(import_hashes: list) -> dict:
    """Firefly GET /api/v1/transactions body with the given import hashes."""
    return {
        "data": [
            {
                "type": "transactions",
                "id": str(100 + i),
                "attributes": {
                    "transactions": [
                        {
                            "type": "withdrawal",
                            "date": "2024-01-01T00:00:00+03:00",
                            "amount": "10.00",
                            "description": f"Existing {i}",
                            "import_hash_v2": import_hash,
                        }
                    ]
                },
            }
            for i, import_hash in enumerate(import_hashes)
        ],
        "meta": {"pagination": {"total": len(import_hashes), "total_pages": 1}},
    }
