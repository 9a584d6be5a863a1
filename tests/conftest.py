"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Callable, Optional
from fastapi.testclient import TestClient
from ledger_insights.api.dependencies import get_ledger_client
from ledger_insights.api.main import create_app
from ledger_insights.domain.models import Account, LedgerSnapshot, ScheduledTransaction, Transaction
from ledger_insights.infrastructure.clients.ledger import LedgerClient


@pytest.fixture
def ledger_client() -> LedgerClient:
    """Ledger client pointed at a host that is never contacted (fetches are patched)"""
    return LedgerClient(
        base_url="http://ledger.test/v1",
        access_token="test-token",
        max_retries=0,
        backoff_base=0,
    )


@pytest.fixture
def client(ledger_client: LedgerClient) -> TestClient:
    """Create FastAPI test client with the test ledger client injected"""
    app = create_app()
    app.dependency_overrides[get_ledger_client] = lambda: ledger_client
    return TestClient(app)


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for transactions with sensible defaults"""
    counter = {"n": 0}

    def _make(
        on: date,
        amount_milliunits: int,
        payee_id: Optional[str] = "payee_default",
        payee_name: str = "Default Payee",
        category_id: Optional[str] = "cat_default",
        category_name: Optional[str] = "Default",
        is_transfer: bool = False,
        deleted: bool = False,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            transaction_id=f"txn_{counter['n']}",
            date=on,
            amount_milliunits=amount_milliunits,
            payee_name=payee_name,
            payee_id=payee_id,
            category_id=category_id,
            category_name=category_name,
            is_transfer=is_transfer,
            deleted=deleted,
        )

    return _make


@pytest.fixture
def sample_transactions(make_txn) -> list[Transaction]:
    """Six months of history: a monthly subscription, weekly groceries, salary and noise"""
    today = date.today()
    transactions = []

    # Monthly streaming subscription, $15.99
    for i in range(6):
        transactions.append(
            make_txn(
                today - timedelta(days=5 + i * 30),
                -15990,
                payee_id="payee_stream",
                payee_name="StreamFlix",
                category_id="cat_subs",
                category_name="Subscriptions",
            )
        )

    # Weekly groceries, $80
    for i in range(20):
        transactions.append(
            make_txn(
                today - timedelta(days=2 + i * 7),
                -80000,
                payee_id="payee_grocer",
                payee_name="Corner Grocer",
                category_id="cat_groceries",
                category_name="Groceries",
            )
        )

    # Bi-weekly salary, $2000
    for i in range(10):
        transactions.append(
            make_txn(
                today - timedelta(days=3 + i * 14),
                2000000,
                payee_id="payee_employer",
                payee_name="Employer Inc",
                category_id="cat_income",
                category_name="Inflow: Ready to Assign",
            )
        )

    # Irregular one-offs at a hardware store
    for offset in (4, 11, 60, 62, 150):
        transactions.append(
            make_txn(
                today - timedelta(days=offset),
                -45000,
                payee_id="payee_hardware",
                payee_name="Hardware Barn",
                category_id="cat_home",
                category_name="Home",
            )
        )

    # Transfer between accounts never counts as spending
    transactions.append(
        make_txn(today - timedelta(days=1), -500000, payee_id="payee_transfer", payee_name="Transfer : Savings", is_transfer=True)
    )

    return transactions


@pytest.fixture
def sample_accounts() -> list[Account]:
    return [
        Account(account_id="acct_checking", name="Checking", balance_milliunits=1500000),
        Account(account_id="acct_savings", name="Savings", balance_milliunits=5000000),
        Account(account_id="acct_card", name="Credit Card", balance_milliunits=-250000),
        Account(account_id="acct_mortgage", name="Mortgage", balance_milliunits=-200000000, on_budget=False),
        Account(account_id="acct_old", name="Old Checking", balance_milliunits=999000, closed=True),
    ]


@pytest.fixture
def sample_scheduled() -> list[ScheduledTransaction]:
    today = date.today()
    return [
        ScheduledTransaction(
            scheduled_id="sched_rent",
            account_id="acct_checking",
            date_next=today + timedelta(days=3),
            amount_milliunits=-1200000,
            frequency="monthly",
            payee_name="Landlord",
        ),
        ScheduledTransaction(
            scheduled_id="sched_salary",
            account_id="acct_checking",
            date_next=today + timedelta(days=10),
            amount_milliunits=2000000,
            frequency="everyOtherWeek",
            payee_name="Employer Inc",
        ),
    ]


@pytest.fixture
def sample_snapshot(sample_transactions, sample_accounts, sample_scheduled) -> LedgerSnapshot:
    return LedgerSnapshot(
        transactions=sample_transactions,
        accounts=sample_accounts,
        scheduled=sample_scheduled,
        categories={
            "cat_subs": "Subscriptions",
            "cat_groceries": "Groceries",
            "cat_home": "Home",
        },
    )
