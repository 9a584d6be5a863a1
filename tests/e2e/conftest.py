"""
Stub ledger server and persona data for end-to-end tests.

The stub speaks the same JSON envelope as the real ledger API and is mounted
in-process through httpx.ASGITransport, so the full path (ledger client,
retries, mapping, analysis, response schemas) runs without a network.
"""

import httpx
import pytest
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from dateutil.relativedelta import relativedelta
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from ledger_insights.api.dependencies import get_ledger_client
from ledger_insights.api.main import create_app
from ledger_insights.infrastructure.clients.ledger import LedgerClient

STUB_BASE_URL = "http://ledger.stub/v1"

CATEGORY_GROUPS = [
    {
        "name": "Internal Master Category",
        "deleted": False,
        "categories": [{"id": "cat_inflow", "name": "Inflow: Ready to Assign", "hidden": False, "deleted": False}],
    },
    {
        "name": "Bills",
        "deleted": False,
        "categories": [
            {"id": "cat_rent", "name": "Rent", "hidden": False, "deleted": False},
            {"id": "cat_subs", "name": "Subscriptions", "hidden": False, "deleted": False},
            {"id": "cat_phone", "name": "Phone", "hidden": False, "deleted": False},
        ],
    },
    {
        "name": "Everyday",
        "deleted": False,
        "categories": [
            {"id": "cat_groceries", "name": "Groceries", "hidden": False, "deleted": False},
            {"id": "cat_dining", "name": "Dining Out", "hidden": False, "deleted": False},
            {"id": "cat_misc", "name": "Misc", "hidden": True, "deleted": False},
        ],
    },
]

CATEGORY_NAMES = {cat["id"]: cat["name"] for group in CATEGORY_GROUPS for cat in group["categories"]}


def _days_ago(days: int) -> date:
    return date.today() - timedelta(days=days)


def _month_day(months_back: int) -> date:
    """First day of the month `months_back` months before the current one"""
    return date.today().replace(day=1) - relativedelta(months=months_back)


class PersonaBuilder:
    """Accumulates one persona's ledger in the ledger API's JSON shape"""

    def __init__(self):
        self.transactions: List[Dict[str, Any]] = []
        self.accounts: List[Dict[str, Any]] = []
        self.scheduled: List[Dict[str, Any]] = []

    def account(self, name: str, balance: int, on_budget: bool = True, closed: bool = False):
        self.accounts.append(
            {
                "id": f"acct_{len(self.accounts)}",
                "name": name,
                "balance": balance,
                "on_budget": on_budget,
                "closed": closed,
                "deleted": False,
            }
        )
        return self

    def txn(self, on: date, amount: int, payee: str, category_id: Optional[str], transfer: bool = False):
        self.transactions.append(
            {
                "id": f"txn_{len(self.transactions)}",
                "date": on.isoformat(),
                "amount": amount,
                "payee_id": f"payee_{payee.lower().replace(' ', '_')}",
                "payee_name": payee,
                "category_id": category_id,
                "category_name": CATEGORY_NAMES.get(category_id),
                "transfer_account_id": "acct_transfer" if transfer else None,
                "deleted": False,
            }
        )
        return self

    def schedule(self, date_next: date, amount: int, frequency: str, payee: str, category_id: Optional[str] = None):
        self.scheduled.append(
            {
                "id": f"sched_{len(self.scheduled)}",
                "account_id": "acct_0",
                "date_next": date_next.isoformat(),
                "amount": amount,
                "frequency": frequency,
                "payee_id": None,
                "payee_name": payee,
                "category_id": category_id,
                "category_name": CATEGORY_NAMES.get(category_id),
                "deleted": False,
            }
        )
        return self


def build_personas() -> Dict[str, PersonaBuilder]:
    """
    Budget personas:
    - steady: salaried renter with subscriptions and weekly groceries
    - overdrawn: rent due before payday on a thin balance
    - gig: irregular payouts and one fixed phone bill
    - growing: restaurant spending climbing month over month
    - newcomer: brand-new budget with no history
    """
    steady = PersonaBuilder().account("Checking", 3000000).account("Savings", 8000000).account(
        "Car Loan", -12000000, on_budget=False
    )
    for k in range(6):
        steady.txn(_month_day(k), -1200000, "Landlord", "cat_rent")
    for i in range(6):
        steady.txn(_days_ago(4 + i * 30), -15990, "StreamFlix", "cat_subs")
    for i in range(24):
        steady.txn(_days_ago(1 + i * 7), -90000, "Corner Grocer", "cat_groceries")
    for i in range(12):
        steady.txn(_days_ago(6 + i * 14), 2500000, "Employer Inc", "cat_inflow")
    for i in range(6):
        steady.txn(_days_ago(2 + i * 30), -300000, "Transfer : Savings", None, transfer=True)
    steady.schedule(_month_day(-1), -1200000, "monthly", "Landlord", "cat_rent")
    steady.schedule(date.today() + timedelta(days=8), 2500000, "everyOtherWeek", "Employer Inc", "cat_inflow")

    overdrawn = PersonaBuilder().account("Checking", 200000).account("Credit Card", -50000)
    for offset in (3, 17, 45, 90):
        overdrawn.txn(_days_ago(offset), -25000, "Quick Mart", "cat_groceries")
    overdrawn.schedule(date.today() + timedelta(days=5), -1200000, "monthly", "Landlord", "cat_rent")
    overdrawn.schedule(date.today() + timedelta(days=20), 900000, "never", "Employer Inc", "cat_inflow")

    gig = PersonaBuilder().account("Checking", 400000)
    for offset in (1, 4, 90, 95, 175):
        gig.txn(_days_ago(offset), 350000, "RideShare Payouts", "cat_inflow")
    for k in range(6):
        gig.txn(_month_day(k), -60000, "Phone Co", "cat_phone")

    growing = PersonaBuilder().account("Checking", 2500000)
    for k, amount in zip(range(5, -1, -1), (100000, 120000, 150000, 180000, 220000, 260000)):
        growing.txn(_month_day(k), -amount, "Bistro Row", "cat_dining")
        growing.txn(_month_day(k), -400000, "Corner Grocer", "cat_groceries")
        growing.txn(_month_day(k), -5000, "Hidden Stuff", "cat_misc")

    newcomer = PersonaBuilder()

    return {"steady": steady, "overdrawn": overdrawn, "gig": gig, "growing": growing, "newcomer": newcomer}


def create_stub_ledger(personas: Dict[str, PersonaBuilder]) -> FastAPI:
    app = FastAPI(title="Stub Ledger Server")

    def _persona(budget_id: str) -> PersonaBuilder:
        if budget_id not in personas:
            raise HTTPException(status_code=404, detail="budget not found")
        return personas[budget_id]

    @app.get("/v1/budgets/{budget_id}/transactions")
    def transactions(budget_id: str, since_date: Optional[str] = None):
        rows = _persona(budget_id).transactions
        if since_date:
            rows = [t for t in rows if t["date"] >= since_date]
        return {"data": {"transactions": rows}}

    @app.get("/v1/budgets/{budget_id}/accounts")
    def accounts(budget_id: str):
        return {"data": {"accounts": _persona(budget_id).accounts}}

    @app.get("/v1/budgets/{budget_id}/scheduled_transactions")
    def scheduled(budget_id: str):
        return {"data": {"scheduled_transactions": _persona(budget_id).scheduled}}

    @app.get("/v1/budgets/{budget_id}/categories")
    def categories(budget_id: str):
        _persona(budget_id)
        return {"data": {"category_groups": CATEGORY_GROUPS}}

    return app


@pytest.fixture
def personas() -> Dict[str, PersonaBuilder]:
    return build_personas()


@pytest.fixture
def client(personas) -> TestClient:
    """API client whose ledger client talks to the in-process stub ledger"""
    stub = create_stub_ledger(personas)

    def override_get_ledger_client() -> LedgerClient:
        return LedgerClient(
            base_url=STUB_BASE_URL,
            access_token="stub-token",
            max_retries=0,
            transport=httpx.ASGITransport(app=stub),
        )

    app = create_app()
    app.dependency_overrides[get_ledger_client] = override_get_ledger_client
    return TestClient(app)
