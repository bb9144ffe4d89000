import pandas as pd
import streamlit as st

from config import get_settings
from domain.models import PAYMENT_LABELS
from element_component import live_refresh, load_transactions, now_local, require_store
from services.aggregator import daily_rollups, payment_method_distribution
from utils.formatting import format_hari, format_price, format_short

st.set_page_config(page_title="Laporan", page_icon="📈")
st.sidebar.header("📈 Laporan")

store = require_store()
live_refresh(store, "laporan")

window_days = get_settings().report_window_days

st.title("📈 Laporan")

transactions = load_transactions(store)
days = daily_rollups(transactions, window_days, now_local())

window_revenue = sum(d.revenue for d in days.values())
window_count = sum(d.transaction_count for d in days.values())

col_rev, col_avg = st.columns(2)
col_rev.metric(
    f"Pendapatan {window_days} Hari Terakhir",
    format_price(window_revenue),
    help=f"Dari {window_count} transaksi",
)
col_avg.metric("Rata-rata Harian", format_price(window_revenue / window_days))

st.divider()

# -----------------------------------------------------------------------------
# Revenue per day
# -----------------------------------------------------------------------------
st.subheader(f"Pendapatan {window_days} Hari Terakhir")

df_daily = pd.DataFrame(
    [
        {
            "Tanggal": d.date,
            "Hari": format_hari(d.date),
            "Pendapatan": d.revenue,
            "Transaksi": d.transaction_count,
        }
        for d in days.values()
    ]
)

st.bar_chart(df_daily, x="Tanggal", y="Pendapatan")

df_daily_display = df_daily.copy()
df_daily_display["Pendapatan"] = df_daily_display["Pendapatan"].apply(format_price)
df_daily_display["Singkat"] = df_daily["Pendapatan"].apply(format_short)
st.dataframe(df_daily_display, width="stretch", hide_index=True)

# -----------------------------------------------------------------------------
# Payment methods (all time)
# -----------------------------------------------------------------------------
st.subheader("Metode Pembayaran")

distribution = payment_method_distribution(transactions)
total_count = sum(distribution.values())

df_payment = pd.DataFrame(
    [
        {
            "Metode": PAYMENT_LABELS.get(method, method),
            "Jumlah": count,
            "Persentase": f"{(count / total_count * 100) if total_count else 0:.0f}%",
        }
        for method, count in distribution.items()
    ]
)

st.bar_chart(df_payment, x="Metode", y="Jumlah")
st.dataframe(df_payment, width="stretch", hide_index=True)
