import pandas as pd
import streamlit as st

from domain.models import CATEGORY_LABELS
from element_component import get_backend, stop_live_refresh
from services.menu_service import load_menu, menu_stats, search_menu
from utils.formatting import format_price

st.set_page_config(page_title="Menu", page_icon="🍽️")
st.sidebar.header("🍽️ Menu")

stop_live_refresh()

st.title("🍽️ Menu")

menu, source = load_menu(get_backend())
if source == "default":
    st.warning("Tabel menu_items kosong atau tidak bisa dibaca, menampilkan menu bawaan.")

stats = menu_stats(menu)
col_1, col_2, col_3, col_4 = st.columns(4)
col_1.metric("Total Menu", stats["total"])
col_2.metric("Tersedia", stats["available"])
col_3.metric("Habis", stats["unavailable"])
col_4.metric("Kategori", stats["categories"])

query = st.text_input("Cari", placeholder="Cari menu atau kategori...")
items = search_menu(menu, query)

st.subheader(f"Daftar Menu ({len(items)})")

if not items:
    st.info("Tidak ada menu yang ditemukan" if query else "Belum ada menu")
    st.stop()

df = pd.DataFrame(
    [
        {
            "Nama": item.name,
            "Kategori": CATEGORY_LABELS.get(item.category, item.category),
            "Harga": format_price(item.price),
            "Deskripsi": item.description or "-",
            "Status": "Tersedia" if item.is_available else "Habis",
        }
        for item in items
    ]
)

st.dataframe(df, width="stretch", hide_index=True)
