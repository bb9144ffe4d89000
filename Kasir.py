import streamlit as st

from domain.models import CATEGORY_LABELS, PAYMENT_CASH, PAYMENT_LABELS, PAYMENT_METHODS
from element_component import (
    confirmation_dialog_delete,
    confirmation_dialog_submit_order,
    get_backend,
    live_refresh,
    load_transactions,
    now_local,
    require_store,
)
from services.aggregator import average_transaction, today_total, today_transactions
from services.menu_service import available_items, group_by_category, load_menu
from services.order_builder import Order
from utils.formatting import format_price, format_waktu

st.set_page_config(
    page_title="Kasir Warung",
    page_icon="🍛",
    layout="wide",
)

st.sidebar.header("🍛 Kasir")

if "order" not in st.session_state:
    st.session_state["order"] = Order()

if "order_submit_state" not in st.session_state:
    st.session_state["order_submit_state"] = None

order: Order = st.session_state["order"]
store = require_store()
live_refresh(store, "kasir")

# -------------------------------------------------------------------
# Today's stats
# -------------------------------------------------------------------

now = now_local()
transactions = load_transactions(store)
todays = today_transactions(transactions, now)
today_sum = today_total(transactions, now)

col_total, col_count, col_avg = st.columns(3)
col_total.metric("Total Pendapatan Hari Ini", format_price(today_sum))
col_count.metric("Jumlah Transaksi", len(todays), help="Transaksi hari ini")
col_avg.metric("Rata-rata per Transaksi", format_price(average_transaction(todays)))

if st.session_state["order_submit_state"] is not None:
    st.success(f"Transaksi Berhasil! Total {format_price(st.session_state['order_submit_state'])} telah dicatat.")
    st.session_state["order_submit_state"] = None

st.divider()

col_menu, col_order = st.columns([3, 2])

# -------------------------------------------------------------------
# Menu
# -------------------------------------------------------------------

with col_menu:
    st.subheader("Pilih Menu")
    menu, menu_source = load_menu(get_backend())
    if menu_source == "default":
        st.caption("Menu bawaan (tabel menu_items kosong atau tidak bisa dibaca).")

    for category, items in group_by_category(available_items(menu)).items():
        st.markdown(f"**{CATEGORY_LABELS.get(category, category)}**")
        cols = st.columns(3)
        for idx, item in enumerate(items):
            with cols[idx % 3]:
                qty = order.quantity_of(item.id)
                label = f"{item.name}\n\n{format_price(item.price)}"
                if qty:
                    label += f" · {qty}x"
                if st.button(label, key=f"add_{item.id}", width="stretch"):
                    order.add_item(item)
                    st.rerun()

# -------------------------------------------------------------------
# Order panel
# -------------------------------------------------------------------

with col_order:
    st.subheader("Pesanan")

    if order.is_empty():
        st.info("Belum ada item dipesan.")
    else:
        for line in order.lines:
            c_name, c_minus, c_qty, c_plus = st.columns([4, 1, 1, 1])
            c_name.write(f"{line.menu_item.name}  \n{format_price(line.line_total)}")
            if c_minus.button("➖", key=f"minus_{line.menu_item.id}"):
                order.remove_item(line.menu_item.id)
                st.rerun()
            c_qty.write(f"**{line.quantity}**")
            if c_plus.button("➕", key=f"plus_{line.menu_item.id}"):
                order.add_item(line.menu_item)
                st.rerun()

        st.metric("Total", format_price(order.total()))

        if st.button("Kosongkan Pesanan"):
            order.clear()
            st.rerun()

    with st.form("order_submit_form", enter_to_submit=False):
        payment_method = st.radio(
            "Metode Pembayaran",
            PAYMENT_METHODS,
            index=PAYMENT_METHODS.index(PAYMENT_CASH),
            format_func=lambda m: PAYMENT_LABELS[m],
            horizontal=True,
        )
        customer_name = st.text_input("Nama Customer (opsional)")

        submitted = st.form_submit_button("Simpan Transaksi", type="primary")

        if submitted:
            if order.is_empty():
                st.error("Pesanan masih kosong")
            else:
                confirmation_dialog_submit_order(store, order, payment_method, customer_name.strip() or None)

# -------------------------------------------------------------------
# Today's transactions
# -------------------------------------------------------------------

st.divider()
st.subheader(f"Transaksi Hari Ini ({len(todays)})")

if st.session_state.get("delete_state"):
    st.success("Transaksi telah berhasil dihapus.")
    st.session_state["delete_state"] = None

if not todays:
    st.info("Belum ada transaksi hari ini.")

tz = now.tzinfo
for t in todays:
    c_info, c_total, c_del = st.columns([5, 2, 1])
    name = "(nama tidak terbaca)" if t.customer_name_unreadable else (t.customer_name or "Tanpa nama")
    items_text = "(data item rusak)" if t.items_malformed else ", ".join(
        f"{i.menu_item.name} x{i.quantity}" for i in t.items
    )
    c_info.write(f"**{name}** · {format_waktu(t.created_at, tz)} · {PAYMENT_LABELS.get(t.payment_method, t.payment_method)}  \n{items_text}")
    c_total.write(f"**{format_price(t.total)}**")
    if c_del.button("🗑️", key=f"delete_{t.id}"):
        confirmation_dialog_delete(store, t)
