# warung/services/order_builder.py

from typing import Dict, List

from domain.models import MenuItem, OrderItem


class Order:
    """
    In-progress cashier order. One line per menu item id, kept in the order
    items were first added. Lives in st.session_state for one cashier session.
    """

    def __init__(self) -> None:
        self._lines: Dict[str, OrderItem] = {}

    def add_item(self, menu_item: MenuItem) -> None:
        line = self._lines.get(menu_item.id)
        if line is None:
            self._lines[menu_item.id] = OrderItem(menu_item=menu_item, quantity=1)
        else:
            line.quantity += 1

    def remove_item(self, menu_item_id: str) -> None:
        line = self._lines.get(menu_item_id)
        if line is None:
            return
        if line.quantity > 1:
            line.quantity -= 1
        else:
            del self._lines[menu_item_id]

    def clear(self) -> None:
        self._lines.clear()

    def total(self) -> int:
        return sum(line.line_total for line in self._lines.values())

    def quantity_of(self, menu_item_id: str) -> int:
        line = self._lines.get(menu_item_id)
        return line.quantity if line else 0

    @property
    def lines(self) -> List[OrderItem]:
        return list(self._lines.values())

    def snapshot(self) -> List[OrderItem]:
        """Copy of the lines, detached from further edits to this order."""
        return [OrderItem(menu_item=line.menu_item, quantity=line.quantity) for line in self._lines.values()]

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)
