from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

import pytest
from cryptography.fernet import Fernet

from domain.menu_catalog import DEFAULT_MENU
from domain.models import PAYMENT_CASH, Transaction
from services.crypto_service import NameCipher
from services.transaction_store import TransactionStore

JAKARTA = ZoneInfo("Asia/Jakarta")


class FakeBackend:
    """
    In-memory stand-in for SupabaseBackend. Set `fail_insert` / `fail_select` /
    `fail_delete` / `fail_upsert` to an error message to simulate a rejection.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: Dict[str, List[Dict[str, Any]]] = {"transactions": list(rows or [])}
        self.inserted: List[Tuple[str, Dict[str, Any]]] = []
        self.selected: List[Tuple[str, List[Tuple[str, bool]]]] = []
        self.deleted: List[Tuple[str, Any]] = []
        self.upserted: List[Tuple[str, List[Dict[str, Any]], List[str]]] = []
        self.subscriptions: Dict[int, Callable[[], None]] = {}

        self.fail_insert: Optional[str] = None
        self.fail_select: Optional[str] = None
        self.fail_delete: Optional[str] = None
        self.fail_upsert: Optional[str] = None

        self.created_at = "2024-05-01T03:00:00+00:00"
        self._next_id = 1

    def insert(self, table_name, record):
        self.inserted.append((table_name, record))
        if self.fail_insert:
            return False, self.fail_insert, None

        row = dict(record)
        row["id"] = f"trx-{self._next_id}"
        row["created_at"] = self.created_at
        self._next_id += 1
        self.rows.setdefault(table_name, []).append(row)
        return True, "Inserted", row

    def select(self, table_name, order_by: Sequence[Tuple[str, bool]] = ()):
        self.selected.append((table_name, list(order_by)))
        if self.fail_select:
            return False, self.fail_select, []

        rows = list(self.rows.get(table_name, []))
        for col, descending in reversed(list(order_by)):
            rows.sort(key=lambda r: r.get(col) or "", reverse=descending)
        return True, "Fetched", rows

    def delete_row(self, table_name, row_id):
        self.deleted.append((table_name, row_id))
        if self.fail_delete:
            return False, self.fail_delete, []

        rows = self.rows.get(table_name, [])
        gone = [r for r in rows if r.get("id") == row_id]
        self.rows[table_name] = [r for r in rows if r.get("id") != row_id]
        return True, "Deleted" if gone else "No row with that id", gone

    def upsert(self, table_name, rows, conflict_cols):
        self.upserted.append((table_name, list(rows), list(conflict_cols)))
        if self.fail_upsert:
            return False, self.fail_upsert, 0
        return True, "Upserted", len(rows)

    def subscribe_to_changes(self, table_name, on_change):
        handle = len(self.subscriptions) + 1
        self.subscriptions[handle] = on_change
        return handle

    def unsubscribe(self, subscription):
        self.subscriptions.pop(subscription, None)

    def fire_change(self):
        for callback in list(self.subscriptions.values()):
            callback()


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def cipher() -> NameCipher:
    return NameCipher(Fernet.generate_key().decode("utf-8"))


@pytest.fixture()
def store(backend, cipher) -> TransactionStore:
    return TransactionStore(backend, cipher)


@pytest.fixture()
def menu_by_id():
    return {item.id: item for item in DEFAULT_MENU}


def make_tx(
        tx_id: str,
        total: int,
        created_at: datetime,
        payment_method: str = PAYMENT_CASH,
        customer_name: Optional[str] = None,
        **kwargs,
) -> Transaction:
    return Transaction(
        id=tx_id,
        items=[],
        total=total,
        payment_method=payment_method,
        created_at=created_at,
        customer_name=customer_name,
        **kwargs,
    )
