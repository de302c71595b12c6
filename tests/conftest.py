"""
Pytest fixtures for GiveFi tests. Uses a temporary SQLite DB for the donation ledger.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from solders.hash import Hash
from solders.signature import Signature


@pytest.fixture
def ledger_db(tmp_path, monkeypatch):
    """
    Point the ledger at a temporary SQLite DB and create tables.
    Resets the engine cache so each test gets a fresh DB. Unset DATABASE_URL so we use SQLite.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("GIVEFI_DB_PATH", str(tmp_path / "givefi_test.db"))

    import backend_givefi.database as db

    db.reset_engine()
    db.init_db()
    yield db
    db.reset_engine()


@pytest.fixture
def client(ledger_db):
    """FastAPI TestClient. Depends on ledger_db so the temp DB is set before the app runs."""
    from fastapi.testclient import TestClient

    from backend_givefi.api_server.server import app

    return TestClient(app)


class FakeRpc:
    """
    Stand-in for solana.rpc.api.Client: fixed balance, records every sent
    transaction, and fails the sends whose 1-based index is in fail_on.
    """

    def __init__(self, balance: int, fail_on: tuple[int, ...] = (), balance_error: bool = False) -> None:
        self.balance = balance
        self.fail_on = fail_on
        self.balance_error = balance_error
        self.attempts = 0
        self.sent: list[Any] = []
        self.balance_calls = 0

    def get_balance(self, pubkey):
        self.balance_calls += 1
        if self.balance_error:
            raise ConnectionError("rpc unreachable")
        return MagicMock(value=self.balance)

    def get_latest_blockhash(self):
        return MagicMock(value=MagicMock(blockhash=Hash.default()))

    def send_transaction(self, tx):
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise RuntimeError("Transaction simulation failed")
        self.sent.append(tx)
        return MagicMock(value=Signature.new_unique())


@pytest.fixture
def fake_rpc_factory():
    return FakeRpc
