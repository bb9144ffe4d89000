# warung/domain/menu_catalog.py
"""Default stall menu, used when the `menu_items` table is empty."""

from typing import List

from domain.models import CATEGORY_ADD_ON, CATEGORY_DRINK, CATEGORY_FOOD, MenuItem

DEFAULT_MENU: List[MenuItem] = [
    # Makanan
    MenuItem("1", "Nasi Putih", 5000, CATEGORY_FOOD),
    MenuItem("2", "Nasi Ayam Goreng", 18000, CATEGORY_FOOD),
    MenuItem("3", "Nasi Ayam Bakar", 20000, CATEGORY_FOOD),
    MenuItem("4", "Nasi Rendang", 22000, CATEGORY_FOOD),
    MenuItem("5", "Nasi Ikan Goreng", 17000, CATEGORY_FOOD),
    MenuItem("6", "Nasi Telur Dadar", 12000, CATEGORY_FOOD),
    MenuItem("7", "Nasi Sayur Asem", 10000, CATEGORY_FOOD),
    MenuItem("8", "Nasi Gudeg", 18000, CATEGORY_FOOD),
    # Minuman
    MenuItem("9", "Es Teh Manis", 5000, CATEGORY_DRINK),
    MenuItem("10", "Es Jeruk", 7000, CATEGORY_DRINK),
    MenuItem("11", "Teh Hangat", 4000, CATEGORY_DRINK),
    MenuItem("12", "Kopi Hitam", 5000, CATEGORY_DRINK),
    MenuItem("13", "Es Kelapa Muda", 10000, CATEGORY_DRINK),
    # Tambahan
    MenuItem("14", "Kerupuk", 2000, CATEGORY_ADD_ON),
    MenuItem("15", "Sambal Extra", 3000, CATEGORY_ADD_ON),
    MenuItem("16", "Lalapan", 5000, CATEGORY_ADD_ON),
    MenuItem("17", "Tempe Goreng", 4000, CATEGORY_ADD_ON),
    MenuItem("18", "Tahu Goreng", 4000, CATEGORY_ADD_ON),
]
