"""Partition transactions into per-payee / per-category buckets"""

from collections import defaultdict
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.domain.models import Transaction

DIRECTIONS = ("outflow", "inflow", "all")


def filter_transactions(
    transactions: Iterable[Transaction],
    *,
    direction: str = "outflow",
    since: Optional[date] = None,
    include_transfers: bool = False,
    include_deleted: bool = False,
) -> List[Transaction]:
    """
    Select the transactions an analysis is allowed to see.

    Transfers and deleted transactions are excluded unless explicitly requested.
    """
    if direction not in DIRECTIONS:
        raise InvalidInputError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    selected = []
    for txn in transactions:
        if txn.deleted and not include_deleted:
            continue
        if txn.is_transfer and not include_transfers:
            continue
        if since is not None and txn.date < since:
            continue
        if direction == "outflow" and txn.amount_milliunits >= 0:
            continue
        if direction == "inflow" and txn.amount_milliunits <= 0:
            continue
        selected.append(txn)
    return selected


def group_by(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], Optional[str]],
) -> Dict[str, List[Transaction]]:
    """
    Map each key to its transactions ordered by date.

    Transactions without a key are dropped, never pooled under an
    "unknown" bucket.
    """
    buckets: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        bucket_key = key(txn)
        if not bucket_key:
            continue
        buckets[bucket_key].append(txn)

    # sorted() is stable, so same-day transactions keep their input order
    return {k: sorted(v, key=lambda t: t.date) for k, v in buckets.items()}


def group_by_payee(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    return group_by(transactions, lambda t: t.payee_id)


def group_by_category(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    return group_by(transactions, lambda t: t.category_id)
