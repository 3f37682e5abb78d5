"""
Pytest configuration and fixtures.

DATABASE_URL has to be set before database.database is imported anywhere,
since the engine is created at import time.
"""

import os

os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")

import pytest

from database.database import engine, create_tables, drop_tables


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def clean_db():
    """Fresh schema for each DB test."""
    drop_tables()
    create_tables()
    yield engine
    drop_tables()


@pytest.fixture
def seed(clean_db):
    """Helpers for writing ledger rows (see tests/fixtures/ledger.py)."""
    from tests.fixtures.ledger import LedgerSeeder
    return LedgerSeeder()
