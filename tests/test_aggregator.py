from datetime import datetime, timedelta, timezone

import pytest

from conftest import JAKARTA, make_tx
from domain.models import PAYMENT_CASH, PAYMENT_TRANSFER
from services import aggregator

NOW = datetime(2024, 5, 7, 20, 0, tzinfo=JAKARTA)


def test_today_scenario():
    transactions = [
        make_tx("t1", 20000, datetime(2024, 5, 7, 9, 0, tzinfo=JAKARTA)),
        make_tx("t2", 15000, datetime(2024, 5, 7, 12, 30, tzinfo=JAKARTA)),
        make_tx("y1", 50000, datetime(2024, 5, 6, 19, 0, tzinfo=JAKARTA)),
    ]

    todays = aggregator.today_transactions(transactions, NOW)

    assert [t.id for t in todays] == ["t1", "t2"]
    assert aggregator.today_total(transactions, NOW) == 35000


def test_today_uses_local_calendar_day_not_utc():
    # 18:00 UTC on the 6th is 01:00 on the 7th in Jakarta
    early_local = make_tx("early", 10000, datetime(2024, 5, 6, 18, 0, tzinfo=timezone.utc))
    # 16:59 UTC on the 6th is 23:59 on the 6th in Jakarta
    late_yesterday = make_tx("late", 10000, datetime(2024, 5, 6, 16, 59, tzinfo=timezone.utc))

    todays = aggregator.today_transactions([early_local, late_yesterday], NOW)

    assert [t.id for t in todays] == ["early"]


def test_today_with_no_transactions():
    assert aggregator.today_transactions([], NOW) == []
    assert aggregator.today_total([], NOW) == 0


def test_customer_rollup_scenario():
    transactions = [
        make_tx("b3", 30000, datetime(2024, 5, 7, 12, tzinfo=JAKARTA), PAYMENT_TRANSFER, "Budi"),
        make_tx("s1", 5000, datetime(2024, 5, 6, 12, tzinfo=JAKARTA), PAYMENT_CASH, "Siti"),
        make_tx("b2", 20000, datetime(2024, 5, 5, 12, tzinfo=JAKARTA), PAYMENT_CASH, "Budi"),
        make_tx("b1", 10000, datetime(2024, 5, 4, 12, tzinfo=JAKARTA), PAYMENT_CASH, "Budi"),
    ]

    rollups = aggregator.customer_rollups(transactions)

    assert list(rollups) == ["Budi", "Siti"]

    budi = rollups["Budi"]
    assert budi.total_transactions == 3
    assert budi.total_spent == 60000
    assert budi.payment_methods_seen == {PAYMENT_CASH, PAYMENT_TRANSFER}
    assert budi.last_transaction_at == datetime(2024, 5, 7, 12, tzinfo=JAKARTA)

    siti = rollups["Siti"]
    assert siti.total_transactions == 1
    assert siti.total_spent == 5000
    assert siti.payment_methods_seen == {PAYMENT_CASH}


def test_customer_rollup_keeps_latest_when_input_is_oldest_first():
    older = make_tx("1", 1000, datetime(2024, 5, 1, tzinfo=JAKARTA), customer_name="Budi")
    newer = make_tx("2", 1000, datetime(2024, 5, 3, tzinfo=JAKARTA), customer_name="Budi")

    rollups = aggregator.customer_rollups([older, newer])

    assert rollups["Budi"].last_transaction_at == newer.created_at


def test_customer_rollup_trims_but_is_case_sensitive():
    ts = datetime(2024, 5, 7, 10, tzinfo=JAKARTA)
    transactions = [
        make_tx("1", 1000, ts, customer_name="Budi"),
        make_tx("2", 2000, ts, customer_name="  Budi "),
        make_tx("3", 4000, ts, customer_name="budi"),
    ]

    rollups = aggregator.customer_rollups(transactions)

    assert set(rollups) == {"Budi", "budi"}
    assert rollups["Budi"].total_spent == 3000
    assert rollups["budi"].total_spent == 4000


def test_customer_rollup_excludes_anonymous_and_unreadable():
    ts = datetime(2024, 5, 7, 10, tzinfo=JAKARTA)
    transactions = [
        make_tx("1", 1000, ts),
        make_tx("2", 1000, ts, customer_name="   "),
        make_tx("3", 1000, ts, customer_name=None, customer_name_unreadable=True),
        make_tx("4", 1000, ts, customer_name="Siti"),
    ]

    assert list(aggregator.customer_rollups(transactions)) == ["Siti"]


def test_daily_rollups_zero_fill_and_window():
    transactions = [
        make_tx("today-1", 10000, datetime(2024, 5, 7, 8, tzinfo=JAKARTA)),
        make_tx("today-2", 5000, datetime(2024, 5, 7, 19, tzinfo=JAKARTA)),
        make_tx("first-day", 7000, datetime(2024, 5, 1, 0, 30, tzinfo=JAKARTA)),
        make_tx("too-old", 99000, datetime(2024, 4, 30, 23, 59, tzinfo=JAKARTA)),
    ]

    days = aggregator.daily_rollups(transactions, 7, NOW)

    assert list(days) == [
        "2024-05-01", "2024-05-02", "2024-05-03", "2024-05-04",
        "2024-05-05", "2024-05-06", "2024-05-07",
    ]
    assert days["2024-05-07"].revenue == 15000
    assert days["2024-05-07"].transaction_count == 2
    assert days["2024-05-01"].revenue == 7000
    assert days["2024-05-03"].revenue == 0
    assert days["2024-05-03"].transaction_count == 0
    assert sum(d.revenue for d in days.values()) == 22000


def test_daily_rollups_bucket_by_local_day():
    # 17:30 UTC on the 6th is 00:30 on the 7th in Jakarta
    t = make_tx("x", 8000, datetime(2024, 5, 6, 17, 30, tzinfo=timezone.utc))

    days = aggregator.daily_rollups([t], 2, NOW)

    assert days["2024-05-07"].revenue == 8000
    assert days["2024-05-06"].revenue == 0


def test_daily_rollups_single_day_window():
    days = aggregator.daily_rollups([], 1, NOW)

    assert list(days) == ["2024-05-07"]


def test_daily_rollups_rejects_empty_window():
    with pytest.raises(ValueError):
        aggregator.daily_rollups([], 0, NOW)


def test_payment_method_distribution_counts_all_time():
    transactions = [
        make_tx("1", 1000, NOW - timedelta(days=30), PAYMENT_CASH),
        make_tx("2", 1000, NOW, PAYMENT_CASH),
        make_tx("3", 1000, NOW, PAYMENT_TRANSFER),
    ]

    assert aggregator.payment_method_distribution(transactions) == {PAYMENT_CASH: 2, PAYMENT_TRANSFER: 1}


def test_payment_method_distribution_empty_has_zero_buckets():
    assert aggregator.payment_method_distribution([]) == {PAYMENT_CASH: 0, PAYMENT_TRANSFER: 0}


def test_dashboard_summary():
    transactions = [
        make_tx("1", 20000, datetime(2024, 5, 7, 9, tzinfo=JAKARTA), customer_name="Budi"),
        make_tx("2", 10000, datetime(2024, 5, 6, 9, tzinfo=JAKARTA), customer_name="Budi"),
        make_tx("3", 30000, datetime(2024, 5, 5, 9, tzinfo=JAKARTA), customer_name="Siti"),
        make_tx("4", 4000, datetime(2024, 5, 7, 10, tzinfo=JAKARTA)),
    ]

    summary = aggregator.dashboard_summary(transactions, NOW)

    assert summary.total_revenue == 64000
    assert summary.total_transactions == 4
    assert summary.today_revenue == 24000
    assert summary.today_transactions == 2
    assert summary.total_customers == 2
    assert summary.average_transaction == 16000


def test_dashboard_summary_empty():
    summary = aggregator.dashboard_summary([], NOW)

    assert summary.total_transactions == 0
    assert summary.average_transaction == 0


def test_search_transactions_by_name_or_id():
    transactions = [
        make_tx("abc-123", 1000, NOW, customer_name="Budi Santoso"),
        make_tx("def-456", 1000, NOW, customer_name="Siti"),
        make_tx("ghi-789", 1000, NOW),
    ]

    assert [t.id for t in aggregator.search_transactions(transactions, "santoso")] == ["abc-123"]
    assert [t.id for t in aggregator.search_transactions(transactions, "GHI")] == ["ghi-789"]
    assert len(aggregator.search_transactions(transactions, "  ")) == 3


def test_search_customers():
    rollups = aggregator.customer_rollups([
        make_tx("1", 1000, NOW, customer_name="Budi"),
        make_tx("2", 1000, NOW, customer_name="Siti"),
    ])

    assert [r.name for r in aggregator.search_customers(rollups.values(), "bud")] == ["Budi"]
    assert len(aggregator.search_customers(rollups.values(), "")) == 2
