import pandas as pd
import streamlit as st

from config import get_settings
from domain.models import PAYMENT_LABELS
from element_component import live_refresh, load_transactions, require_store
from services.aggregator import customer_rollups, search_customers
from utils.formatting import format_price, format_tanggal

st.set_page_config(page_title="Customer", page_icon="👥")
st.sidebar.header("👥 Customer")

store = require_store()
live_refresh(store, "customer")

st.title("👥 Customer")

transactions = load_transactions(store)
rollups = customer_rollups(transactions)

query = st.text_input("Cari", placeholder="Cari nama customer...")
customers = search_customers(rollups.values(), query)

unreadable = sum(1 for t in transactions if t.customer_name_unreadable)
if unreadable:
    st.warning(f"{unreadable} transaksi memiliki nama customer yang tidak bisa dibaca dan tidak dihitung di sini.")

st.subheader(f"Daftar Customer ({len(customers)})")

if not customers:
    st.info("Tidak ada customer yang ditemukan" if query else "Belum ada data customer")
    st.stop()

tz = get_settings().tz
df = pd.DataFrame(
    [
        {
            "Nama": c.name,
            "Total Transaksi": f"{c.total_transactions}x",
            "Total Belanja": format_price(c.total_spent),
            "Metode Pembayaran": ", ".join(PAYMENT_LABELS.get(m, m) for m in sorted(c.payment_methods_seen)),
            "Transaksi Terakhir": format_tanggal(c.last_transaction_at, tz),
        }
        for c in customers
    ]
)

st.dataframe(df, width="stretch", hide_index=True)
