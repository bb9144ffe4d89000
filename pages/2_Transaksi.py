import streamlit as st

from element_component import (
    confirmation_dialog_delete,
    live_refresh,
    load_transactions,
    require_store,
    transactions_dataframe,
)
from services.aggregator import search_transactions
from utils.formatting import format_price

st.set_page_config(page_title="Daftar Transaksi", page_icon="🧾")
st.sidebar.header("🧾 Daftar Transaksi")

store = require_store()
live_refresh(store, "transaksi")

st.title("🧾 Daftar Transaksi")

if st.session_state.get("delete_state"):
    st.success("Transaksi berhasil dihapus")
    st.session_state["delete_state"] = None

transactions = load_transactions(store)

query = st.text_input("Cari", placeholder="Cari nama customer atau ID transaksi...")
filtered = search_transactions(transactions, query)

st.subheader(f"Daftar Transaksi ({len(filtered)})")

if not filtered:
    st.info("Tidak ada transaksi yang ditemukan" if query else "Belum ada transaksi")
    st.stop()

df = transactions_dataframe(filtered)
st.dataframe(df, width="stretch", hide_index=True)

st.metric("Total", format_price(sum(t.total for t in filtered)))

st.divider()

# -------------------------------------------------------------------
# Delete
# -------------------------------------------------------------------

by_id = {t.id: t for t in filtered}
to_delete = st.selectbox(
    "Hapus transaksi",
    options=list(by_id.keys()),
    index=None,
    placeholder="Pilih ID transaksi",
    format_func=lambda tid: f"{tid} · {format_price(by_id[tid].total)}",
)

if st.button("Hapus", type="primary", disabled=to_delete is None):
    confirmation_dialog_delete(store, by_id[to_delete])

csv = df.to_csv(index=False).encode("utf-8")
st.download_button(
    "Download as CSV",
    data=csv,
    file_name="transaksi.csv",
    mime="text/csv",
)
