import logging
from datetime import datetime
from typing import List, Optional

import pandas as pd
import streamlit as st

from config import configure_logging, get_settings
from data_integrator import SupabaseBackend
from domain.errors import EmptyOrder, ObfuscationError, PersistenceError
from domain.models import PAYMENT_LABELS, Transaction
from services.crypto_service import NameCipher
from services.order_builder import Order
from services.transaction_store import TransactionStore
from utils.formatting import format_price, format_waktu

logger = logging.getLogger(__name__)


@st.cache_resource
def get_backend() -> SupabaseBackend:
    configure_logging()
    return SupabaseBackend()


@st.cache_resource
def get_store() -> TransactionStore:
    return TransactionStore(get_backend(), NameCipher(get_settings().customer_name_key))


def require_store() -> TransactionStore:
    try:
        return get_store()
    except ObfuscationError as e:
        st.error(f"Konfigurasi enkripsi nama customer belum benar: {e}")
        st.stop()


def now_local() -> datetime:
    return datetime.now(get_settings().tz)


def load_transactions(store: TransactionStore) -> List[Transaction]:
    """
    Fresh read of the whole log. When the read fails the last list this
    session saw is returned so the page goes stale instead of blank.
    """
    try:
        transactions = store.list()
    except PersistenceError as e:
        st.error(f"Gagal memuat transaksi: {e}")
        return st.session_state.get("_last_transactions", [])

    st.session_state["_last_transactions"] = transactions
    return transactions


# -------------------------------------------------------------------
# Live refresh
# -------------------------------------------------------------------

class _ChangeSignal:
    def __init__(self):
        self.version = 0

    def bump(self) -> None:
        self.version += 1


@st.fragment(run_every=get_settings().live_refresh_seconds)
def _watch_changes() -> None:
    signal = st.session_state.get("_live_signal")
    if signal is None:
        return
    if signal.version != st.session_state.get("_live_seen_version"):
        st.session_state["_live_seen_version"] = signal.version
        st.rerun()


def live_refresh(store: TransactionStore, view_key: str) -> None:
    """
    Keep this session subscribed to transaction changes for `view_key` and
    rerun the page when something changes. Moving to another view drops the
    previous view's subscription.
    """
    current_view = st.session_state.get("_live_view")
    if current_view != view_key:
        old_sub = st.session_state.pop("_live_subscription", None)
        if old_sub is not None:
            store.unsubscribe(old_sub)

        signal = _ChangeSignal()
        try:
            st.session_state["_live_subscription"] = store.subscribe(signal.bump)
        except (PersistenceError, RuntimeError) as e:
            logger.warning("Live refresh unavailable for %s: %s", view_key, e)
            st.session_state["_live_view"] = None
            st.caption("Pembaruan otomatis tidak aktif. Muat ulang halaman untuk data terbaru.")
            return

        st.session_state["_live_view"] = view_key
        st.session_state["_live_signal"] = signal
        st.session_state["_live_seen_version"] = signal.version

    _watch_changes()


def stop_live_refresh() -> None:
    """Drop this session's subscription, for views that show no transactions."""
    sub = st.session_state.pop("_live_subscription", None)
    st.session_state.pop("_live_signal", None)
    st.session_state["_live_view"] = None
    if sub is not None:
        get_store().unsubscribe(sub)


# -------------------------------------------------------------------
# Tables
# -------------------------------------------------------------------

def transactions_dataframe(transactions: List[Transaction]) -> pd.DataFrame:
    tz = get_settings().tz
    rows = []
    for t in transactions:
        if t.items_malformed:
            items_text = "(data item rusak)"
        else:
            items_text = ", ".join(f"{i.menu_item.name} x{i.quantity}" for i in t.items)

        if t.customer_name_unreadable:
            name = "(tidak terbaca)"
        else:
            name = t.customer_name or "-"

        rows.append({
            "ID": t.id,
            "Waktu": format_waktu(t.created_at, tz),
            "Customer": name,
            "Item": items_text,
            "Pembayaran": PAYMENT_LABELS.get(t.payment_method, t.payment_method),
            "Total": format_price(t.total),
        })

    return pd.DataFrame(rows, columns=["ID", "Waktu", "Customer", "Item", "Pembayaran", "Total"])


# -------------------------------------------------------------------
# Dialogs
# -------------------------------------------------------------------

@st.dialog("Konfirmasi")
def confirmation_dialog_submit_order(
        store: TransactionStore,
        order: Order,
        payment_method: str,
        customer_name: Optional[str],
):
    df = pd.DataFrame(
        [
            {"Item": line.menu_item.name, "Qty": line.quantity, "Subtotal": format_price(line.line_total)}
            for line in order.lines
        ]
    )
    st.dataframe(df, hide_index=True)
    st.write(f"Pembayaran: **{PAYMENT_LABELS[payment_method]}**")
    if customer_name:
        st.write(f"Customer: **{customer_name}**")
    st.metric("Total", format_price(order.total()))

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Ya", type="primary", key="confirm_submit_yes"):
            try:
                transaction = store.create(order.snapshot(), payment_method, customer_name)
            except EmptyOrder as e:
                st.error(str(e))
                return
            except (PersistenceError, ObfuscationError) as e:
                # order stays as is so the cashier can try again
                st.error(f"Gagal menyimpan transaksi: {e}")
                return

            order.clear()
            st.session_state["order_submit_state"] = transaction.total
            st.rerun()
    with col_no:
        if st.button("Tidak", key="confirm_submit_no"):
            st.rerun()


@st.dialog("Hapus Transaksi")
def confirmation_dialog_delete(store: TransactionStore, transaction: Transaction):
    st.write(f"Hapus transaksi **{transaction.id}** senilai **{format_price(transaction.total)}**?")

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Ya, hapus", type="primary", key="confirm_delete_yes"):
            try:
                store.delete(transaction.id)
            except PersistenceError as e:
                st.error(str(e))
                return
            st.session_state["delete_state"] = transaction.id
            st.rerun()
    with col_no:
        if st.button("Batal", key="confirm_delete_no"):
            st.rerun()
