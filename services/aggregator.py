# warung/services/aggregator.py
"""
Reports derived from the transaction log.

Everything here is a pure function over an already fetched list (as returned
by TransactionStore.list()); nothing is cached between calls.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional

from domain.models import (
    PAYMENT_METHODS,
    CustomerRollup,
    DailyRollup,
    DashboardSummary,
    Transaction,
)


def _local_day(ts: datetime, tz: Optional[tzinfo]) -> date:
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(tz).date()


def today_transactions(transactions: Iterable[Transaction], now: datetime) -> List[Transaction]:
    """Transactions whose created_at falls on `now`'s calendar day, in `now`'s time zone."""
    today = now.date()
    return [t for t in transactions if _local_day(t.created_at, now.tzinfo) == today]


def today_total(transactions: Iterable[Transaction], now: datetime) -> int:
    return sum(t.total for t in today_transactions(transactions, now))


def customer_rollups(transactions: Iterable[Transaction]) -> Dict[str, CustomerRollup]:
    """
    Group by the decrypted, trimmed customer name (case-sensitive).
    Transactions without a readable name are left out.
    """
    rollups: Dict[str, CustomerRollup] = {}

    for t in transactions:
        name = (t.customer_name or "").strip()
        if not name:
            continue

        existing = rollups.get(name)
        if existing is None:
            rollups[name] = CustomerRollup(
                name=name,
                total_transactions=1,
                total_spent=t.total,
                last_transaction_at=t.created_at,
                payment_methods_seen={t.payment_method},
            )
            continue

        existing.total_transactions += 1
        existing.total_spent += t.total
        if t.created_at > existing.last_transaction_at:
            existing.last_transaction_at = t.created_at
        existing.payment_methods_seen.add(t.payment_method)

    return rollups


def daily_rollups(
        transactions: Iterable[Transaction],
        window_days: int,
        now: datetime,
) -> Dict[str, DailyRollup]:
    """
    Revenue and count per day for the last `window_days` days including today,
    oldest first. Days without sales are present with zeros; anything older
    than the window is ignored.
    """
    if window_days < 1:
        raise ValueError("window_days must be at least 1")

    today = now.date()
    days: Dict[str, DailyRollup] = {}
    for offset in range(window_days - 1, -1, -1):
        key = (today - timedelta(days=offset)).isoformat()
        days[key] = DailyRollup(date=key)

    for t in transactions:
        key = _local_day(t.created_at, now.tzinfo).isoformat()
        day = days.get(key)
        if day is None:
            continue
        day.revenue += t.total
        day.transaction_count += 1

    return days


def payment_method_distribution(transactions: Iterable[Transaction]) -> Dict[str, int]:
    counts: Dict[str, int] = {method: 0 for method in PAYMENT_METHODS}
    for t in transactions:
        counts[t.payment_method] = counts.get(t.payment_method, 0) + 1
    return counts


def dashboard_summary(transactions: List[Transaction], now: datetime) -> DashboardSummary:
    todays = today_transactions(transactions, now)
    total_revenue = sum(t.total for t in transactions)

    return DashboardSummary(
        total_revenue=total_revenue,
        total_transactions=len(transactions),
        today_revenue=sum(t.total for t in todays),
        today_transactions=len(todays),
        total_customers=len(customer_rollups(transactions)),
        average_transaction=average_transaction(transactions),
    )


def average_transaction(transactions: List[Transaction]) -> float:
    if not transactions:
        return 0
    return sum(t.total for t in transactions) / len(transactions)


def search_transactions(transactions: Iterable[Transaction], query: str) -> List[Transaction]:
    """Case-insensitive substring match on customer name or transaction id."""
    q = (query or "").strip().lower()
    if not q:
        return list(transactions)
    return [
        t for t in transactions
        if q in t.id.lower() or (t.customer_name and q in t.customer_name.lower())
    ]


def search_customers(rollups: Iterable[CustomerRollup], query: str) -> List[CustomerRollup]:
    q = (query or "").strip().lower()
    if not q:
        return list(rollups)
    return [r for r in rollups if q in r.name.lower()]
