# warung/services/transaction_store.py

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from config import TRANSACTIONS_TABLE
from domain.errors import EmptyOrder, MalformedTransaction, ObfuscationError, PersistenceError
from domain.models import PAYMENT_METHODS, OrderItem, Transaction
from services.crypto_service import NameCipher

logger = logging.getLogger(__name__)


class Backend(Protocol):
    def insert(self, table_name: str, record: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]: ...

    def select(
            self,
            table_name: str,
            order_by: Sequence[Tuple[str, bool]] = (),
    ) -> Tuple[bool, str, List[Dict[str, Any]]]: ...

    def delete_row(self, table_name: str, row_id: Any) -> Tuple[bool, str, List[Dict[str, Any]]]: ...

    def subscribe_to_changes(self, table_name: str, on_change: Callable[[], None]) -> Any: ...

    def unsubscribe(self, subscription: Any) -> None: ...


def parse_timestamp(value: Any) -> datetime:
    """Parse a Postgres timestamptz as returned by PostgREST. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def order_total(items: Sequence[OrderItem]) -> int:
    return sum(item.menu_item.price * item.quantity for item in items)


class TransactionStore:
    """
    Append-only log of committed transactions in the `transactions` table.

    Customer names are encrypted before they leave this class and decrypted
    on the way back. Rows are never updated in place.
    """

    def __init__(self, backend: Backend, cipher: NameCipher, table_name: str = TRANSACTIONS_TABLE):
        self._backend = backend
        self._cipher = cipher
        self._table = table_name

    def create(
            self,
            order_snapshot: Sequence[OrderItem],
            payment_method: str,
            customer_name: Optional[str] = None,
    ) -> Transaction:
        items = list(order_snapshot)
        if not items:
            raise EmptyOrder()

        if payment_method not in PAYMENT_METHODS:
            raise ValueError(f"Invalid payment_method: {payment_method}")

        total = order_total(items)

        encrypted_name = None
        if customer_name and customer_name.strip():
            try:
                encrypted_name = self._cipher.encrypt(customer_name)
            except ObfuscationError as e:
                logger.error("Encrypting customer name failed: %s", e)
                raise

        record = {
            "items": [item.to_dict() for item in items],
            "total": total,
            "payment_method": payment_method,
            "customer_name": encrypted_name,
        }

        ok, msg, row = self._backend.insert(self._table, record)
        if not ok or row is None:
            logger.error("Saving transaction failed: %s", msg)
            raise PersistenceError("Gagal menyimpan transaksi", msg)

        transaction = self._from_row(row)
        logger.info("Transaction %s saved (total=%s, %s)", transaction.id, total, payment_method)
        return transaction

    def list(self) -> List[Transaction]:
        """All transactions, newest first."""
        ok, msg, rows = self._backend.select(self._table, order_by=[("created_at", True)])
        if not ok:
            logger.error("Loading transactions failed: %s", msg)
            raise PersistenceError("Gagal memuat transaksi", msg)

        transactions: List[Transaction] = []
        for row in rows:
            try:
                transactions.append(self._from_row(row))
            except MalformedTransaction as e:
                logger.warning("Skipping transaction row: %s", e)
        return transactions

    def delete(self, transaction_id: str) -> bool:
        """
        Delete one transaction. Returns False when no row had that id;
        deleting twice is not an error.
        """
        ok, msg, deleted = self._backend.delete_row(self._table, transaction_id)
        if not ok:
            logger.error("Deleting transaction %s failed: %s", transaction_id, msg)
            raise PersistenceError("Gagal menghapus transaksi", msg)

        if not deleted:
            logger.info("Transaction %s was already gone", transaction_id)
            return False

        logger.info("Transaction %s deleted", transaction_id)
        return True

    def subscribe(self, on_change: Callable[[], None]) -> Any:
        """Call `on_change()` whenever any client writes to the table."""
        return self._backend.subscribe_to_changes(self._table, on_change)

    def unsubscribe(self, subscription: Any) -> None:
        self._backend.unsubscribe(subscription)

    def _decrypt_name(self, row_id: str, stored: Any) -> Tuple[Optional[str], bool]:
        if stored is None or stored == "":
            return None, False
        try:
            return self._cipher.decrypt(str(stored)), False
        except ObfuscationError as e:
            logger.warning("Customer name of transaction %s is unreadable: %s", row_id, e)
            return None, True

    def _from_row(self, row: Dict[str, Any]) -> Transaction:
        row_id = row.get("id")
        if row_id is None or row_id == "":
            raise MalformedTransaction("Transaction row without id")
        row_id = str(row_id)

        try:
            total = int(round(float(row["total"])))
            created_at = parse_timestamp(row.get("created_at"))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTransaction(f"Transaction {row_id} is unreadable", str(e)) from e

        raw_items = row.get("items")
        items_malformed = False
        try:
            if not isinstance(raw_items, list):
                raise ValueError("items is not a list")
            items = [OrderItem.from_dict(raw) for raw in raw_items]
        except ValueError as e:
            logger.warning("Transaction %s has malformed items: %s", row_id, e)
            items = []
            items_malformed = True

        name, unreadable = self._decrypt_name(row_id, row.get("customer_name"))

        return Transaction(
            id=row_id,
            items=items,
            total=total,
            payment_method=str(row.get("payment_method")),
            created_at=created_at,
            customer_name=name,
            customer_name_unreadable=unreadable,
            items_malformed=items_malformed,
        )
