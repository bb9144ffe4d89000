# warung/services/menu_service.py

import logging
from typing import Any, Dict, List, Optional, Tuple

from config import MENU_ITEMS_TABLE
from domain.menu_catalog import DEFAULT_MENU
from domain.models import MENU_CATEGORIES, MenuItem

logger = logging.getLogger(__name__)


def menu_item_from_row(row: Dict[str, Any]) -> Optional[MenuItem]:
    """Build a MenuItem from a `menu_items` row, or None if the row is unusable."""
    try:
        item_id = str(row["id"])
        name = str(row["name"]).strip()
        price = int(round(float(row["price"])))
        category = str(row["category"]).strip().lower()
    except (KeyError, TypeError, ValueError):
        return None

    if not name or price < 0 or category not in MENU_CATEGORIES:
        return None

    return MenuItem(
        id=item_id,
        name=name,
        price=price,
        category=category,
        description=row.get("description") or None,
        is_available=bool(row.get("is_available", True)),
    )


def load_menu(backend) -> Tuple[List[MenuItem], str]:
    """
    Load the admin-managed menu, ordered by category then name.

    Returns (items, source) where source is "database" or "default". The
    default catalog is used when the table is empty or cannot be read.
    """
    ok, msg, rows = backend.select(MENU_ITEMS_TABLE, order_by=[("category", False), ("name", False)])
    if not ok:
        logger.warning("Loading menu_items failed, using default menu: %s", msg)
        return list(DEFAULT_MENU), "default"

    items = []
    for row in rows:
        item = menu_item_from_row(row)
        if item is None:
            logger.warning("Skipping malformed menu_items row: %r", row.get("id"))
            continue
        items.append(item)

    if not items:
        return list(DEFAULT_MENU), "default"
    return items, "database"


def available_items(items: List[MenuItem]) -> List[MenuItem]:
    return [item for item in items if item.is_available]


def group_by_category(items: List[MenuItem]) -> Dict[str, List[MenuItem]]:
    """Items per category, categories in menu order (makanan, minuman, tambahan)."""
    grouped: Dict[str, List[MenuItem]] = {category: [] for category in MENU_CATEGORIES}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return {category: group for category, group in grouped.items() if group}


def search_menu(items: List[MenuItem], query: str) -> List[MenuItem]:
    q = (query or "").strip().lower()
    if not q:
        return list(items)
    return [item for item in items if q in item.name.lower() or q in item.category.lower()]


def menu_stats(items: List[MenuItem]) -> Dict[str, int]:
    available = sum(1 for item in items if item.is_available)
    return {
        "total": len(items),
        "available": available,
        "unavailable": len(items) - available,
        "categories": len({item.category for item in items}),
    }
