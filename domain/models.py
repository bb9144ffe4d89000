# warung/domain/models.py

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

PAYMENT_CASH = "tunai"
PAYMENT_TRANSFER = "transfer"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_TRANSFER)

PAYMENT_LABELS = {
    PAYMENT_CASH: "Tunai",
    PAYMENT_TRANSFER: "Transfer",
}

CATEGORY_FOOD = "makanan"
CATEGORY_DRINK = "minuman"
CATEGORY_ADD_ON = "tambahan"
MENU_CATEGORIES = (CATEGORY_FOOD, CATEGORY_DRINK, CATEGORY_ADD_ON)

CATEGORY_LABELS = {
    CATEGORY_FOOD: "Makanan",
    CATEGORY_DRINK: "Minuman",
    CATEGORY_ADD_ON: "Tambahan",
}


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    price: int  # whole rupiah
    category: str  # one of MENU_CATEGORIES
    description: Optional[str] = None
    is_available: bool = True

    def snapshot(self) -> Dict[str, Any]:
        """Fields frozen into a transaction at submit time."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
        }


@dataclass
class OrderItem:
    """
    One line of an order or transaction.
    Stored in the `items` jsonb column as {"menuItem": {...}, "quantity": n}.
    """
    menu_item: MenuItem
    quantity: int

    @property
    def line_total(self) -> int:
        return self.menu_item.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {"menuItem": self.menu_item.snapshot(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, raw: Any) -> "OrderItem":
        """
        Validate one stored line. Raises ValueError on anything that does
        not match the line schema.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"order line must be an object, got {type(raw).__name__}")

        menu = raw.get("menuItem")
        qty = raw.get("quantity")

        if not isinstance(menu, dict):
            raise ValueError("order line is missing menuItem")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValueError(f"invalid quantity: {qty!r}")

        item_id = menu.get("id")
        name = menu.get("name")
        price = menu.get("price")
        category = menu.get("category")

        if not isinstance(item_id, str) or not item_id:
            raise ValueError(f"invalid menu item id: {item_id!r}")
        if not isinstance(name, str):
            raise ValueError(f"invalid menu item name: {name!r}")
        # jsonb may hand back 5000.0 for an integer price
        if isinstance(price, float) and price.is_integer():
            price = int(price)
        if isinstance(price, bool) or not isinstance(price, int) or price < 0:
            raise ValueError(f"invalid menu item price: {price!r}")
        if category not in MENU_CATEGORIES:
            raise ValueError(f"invalid menu item category: {category!r}")

        return cls(
            menu_item=MenuItem(id=item_id, name=name, price=price, category=category),
            quantity=qty,
        )


@dataclass(frozen=True)
class Transaction:
    """
    A committed order as read back from the `transactions` table.

    `customer_name` is already decrypted. When decryption fails the name is
    None and `customer_name_unreadable` is set; when the stored items payload
    fails validation `items` is empty and `items_malformed` is set.
    """
    id: str
    items: List[OrderItem]
    total: int
    payment_method: str
    created_at: datetime
    customer_name: Optional[str] = None
    customer_name_unreadable: bool = False
    items_malformed: bool = False


@dataclass
class CustomerRollup:
    name: str
    total_transactions: int
    total_spent: int
    last_transaction_at: datetime
    payment_methods_seen: Set[str] = field(default_factory=set)


@dataclass
class DailyRollup:
    date: str  # ISO yyyy-mm-dd in the app time zone
    revenue: int = 0
    transaction_count: int = 0


@dataclass
class DashboardSummary:
    total_revenue: int
    total_transactions: int
    today_revenue: int
    today_transactions: int
    total_customers: int
    average_transaction: float
