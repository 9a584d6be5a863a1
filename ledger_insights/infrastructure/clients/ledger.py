"""Ledger API HTTP client with exponential backoff retry logic"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List

import httpx

from ledger_insights.config import settings
from ledger_insights.domain.exceptions import LedgerAPIError
from ledger_insights.domain.frequencies import validate_frequency
from ledger_insights.domain.models import Account, LedgerSnapshot, ScheduledTransaction, Transaction
from ledger_insights.infrastructure.observability.metrics import (
    ledger_fetch_failures_counter,
    ledger_latency_histogram,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
HIDDEN_CATEGORY_GROUPS = {"Internal Master Category", "Hidden Categories"}


class LedgerClient:
    """Read-only client for a YNAB-style budget ledger API"""

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ledger_api_base).rstrip("/")
        self.access_token = access_token if access_token is not None else settings.ledger_access_token
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.ledger_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.ledger_backoff_base
        self.transport = transport

    def resolve_budget_id(self, budget_id: str | None = None) -> str:
        return budget_id or settings.default_budget_id

    async def _get(self, path: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """
        GET a ledger resource and return its "data" object.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ...
        - Retries on 429, 5xx and network failures
        - Other 4xx responses fail immediately

        Raises:
            LedgerAPIError: On timeout, HTTP errors after retries, or a malformed body
        """
        attempt = 0
        headers = {"Authorization": f"Bearer {self.access_token}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with ledger_latency_histogram.time():
                        response = await client.get(f"{self.base_url}{path}", params=params, headers=headers)
                        response.raise_for_status()
                    body = response.json()
                    return body["data"]

                except httpx.HTTPStatusError as e:
                    status = e.response.status_code
                    if status not in RETRYABLE_STATUS_CODES or attempt >= self.max_retries:
                        ledger_fetch_failures_counter.inc()
                        raise LedgerAPIError(f"Ledger API error: {status}") from e

                except httpx.TimeoutException as e:
                    if attempt >= self.max_retries:
                        ledger_fetch_failures_counter.inc()
                        raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e

                except httpx.RequestError as e:
                    if attempt >= self.max_retries:
                        ledger_fetch_failures_counter.inc()
                        raise LedgerAPIError(f"Ledger API unreachable: {e.__class__.__name__}") from e

                except (KeyError, ValueError, TypeError) as e:
                    ledger_fetch_failures_counter.inc()
                    raise LedgerAPIError(f"Invalid response from ledger: {e}") from e

                attempt += 1
                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning("Retrying ledger request", extra={"path": path, "attempt": attempt, "backoff": backoff})
                await asyncio.sleep(backoff)

    async def get_transactions(self, budget_id: str | None = None, since_date: date | None = None) -> List[Transaction]:
        """Fetch transactions, optionally only those on or after since_date"""
        budget_id = self.resolve_budget_id(budget_id)
        params = {"since_date": since_date.isoformat()} if since_date else None
        data = await self._get(f"/budgets/{budget_id}/transactions", params=params)
        try:
            return [
                Transaction(
                    transaction_id=txn["id"],
                    date=date.fromisoformat(txn["date"]),
                    amount_milliunits=int(txn["amount"]),
                    payee_name=txn.get("payee_name") or "Unknown",
                    payee_id=txn.get("payee_id"),
                    category_id=txn.get("category_id"),
                    category_name=txn.get("category_name"),
                    is_transfer=bool(txn.get("transfer_account_id")),
                    deleted=bool(txn.get("deleted", False)),
                )
                for txn in data["transactions"]
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerAPIError(f"Invalid transaction data from ledger: {e}") from e

    async def get_accounts(self, budget_id: str | None = None) -> List[Account]:
        budget_id = self.resolve_budget_id(budget_id)
        data = await self._get(f"/budgets/{budget_id}/accounts")
        try:
            return [
                Account(
                    account_id=acct["id"],
                    name=acct["name"],
                    balance_milliunits=int(acct["balance"]),
                    on_budget=bool(acct["on_budget"]),
                    closed=bool(acct.get("closed", False)),
                    deleted=bool(acct.get("deleted", False)),
                )
                for acct in data["accounts"]
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerAPIError(f"Invalid account data from ledger: {e}") from e

    async def get_scheduled_transactions(self, budget_id: str | None = None) -> List[ScheduledTransaction]:
        budget_id = self.resolve_budget_id(budget_id)
        data = await self._get(f"/budgets/{budget_id}/scheduled_transactions")
        try:
            return [
                ScheduledTransaction(
                    scheduled_id=st["id"],
                    account_id=st["account_id"],
                    date_next=date.fromisoformat(st["date_next"]),
                    amount_milliunits=int(st["amount"]),
                    frequency=validate_frequency(st["frequency"]),
                    payee_name=st.get("payee_name") or "Unknown",
                    payee_id=st.get("payee_id"),
                    category_id=st.get("category_id"),
                    category_name=st.get("category_name"),
                    deleted=bool(st.get("deleted", False)),
                )
                for st in data["scheduled_transactions"]
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerAPIError(f"Invalid scheduled transaction data from ledger: {e}") from e

    async def get_categories(self, budget_id: str | None = None) -> Dict[str, str]:
        """Category id -> name for visible categories"""
        budget_id = self.resolve_budget_id(budget_id)
        data = await self._get(f"/budgets/{budget_id}/categories")
        try:
            names: Dict[str, str] = {}
            for group in data["category_groups"]:
                if group["name"] in HIDDEN_CATEGORY_GROUPS or group.get("deleted"):
                    continue
                for cat in group["categories"]:
                    if cat.get("hidden") or cat.get("deleted"):
                        continue
                    names[cat["id"]] = cat["name"]
            return names
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerAPIError(f"Invalid category data from ledger: {e}") from e

    async def fetch_snapshot(
        self,
        budget_id: str | None = None,
        *,
        since_date: date | None = None,
        transactions: bool = True,
        accounts: bool = False,
        scheduled: bool = False,
        categories: bool = False,
    ) -> LedgerSnapshot:
        """
        Fetch the requested collections concurrently.

        Returns only once every fetch succeeded, so analyses never see a
        partially fetched snapshot.
        """
        budget_id = self.resolve_budget_id(budget_id)

        async def _empty_list() -> list:
            return []

        async def _empty_dict() -> dict:
            return {}

        results = await asyncio.gather(
            self.get_transactions(budget_id, since_date) if transactions else _empty_list(),
            self.get_accounts(budget_id) if accounts else _empty_list(),
            self.get_scheduled_transactions(budget_id) if scheduled else _empty_list(),
            self.get_categories(budget_id) if categories else _empty_dict(),
        )
        return LedgerSnapshot(
            transactions=results[0],
            accounts=results[1],
            scheduled=results[2],
            categories=results[3],
        )
