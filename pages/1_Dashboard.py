import streamlit as st

from element_component import live_refresh, load_transactions, now_local, require_store
from services.aggregator import dashboard_summary
from utils.formatting import format_price

st.set_page_config(page_title="Dashboard", page_icon="📊")
st.sidebar.header("📊 Dashboard")

store = require_store()
live_refresh(store, "dashboard")

st.title("📊 Dashboard")

transactions = load_transactions(store)
summary = dashboard_summary(transactions, now_local())

col_1, col_2, col_3 = st.columns(3)
col_1.metric("Total Pendapatan", format_price(summary.total_revenue), help="Semua waktu")
col_2.metric(
    "Pendapatan Hari Ini",
    format_price(summary.today_revenue),
    help=f"{summary.today_transactions} transaksi",
)
col_3.metric("Total Transaksi", summary.total_transactions, help="Semua waktu")

col_4, col_5, _ = st.columns(3)
col_4.metric("Total Customer", summary.total_customers, help="Customer unik")
col_5.metric("Rata-rata Transaksi", format_price(summary.average_transaction), help="Per transaksi")
