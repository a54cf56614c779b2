"""In-memory shopping cart for the active session."""

from __future__ import annotations

from storefront.models import CartItem, MenuItem


class Cart:
    """Ordered cart lines. A line whose quantity reaches zero is removed."""

    def __init__(self, lines: list[CartItem] | None = None) -> None:
        self._lines: list[CartItem] = list(lines or [])

    @property
    def lines(self) -> list[CartItem]:
        return list(self._lines)

    @property
    def item_total(self) -> int:
        return sum(line.subtotal for line in self._lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, item_id: str) -> int:
        for line in self._lines:
            if line.id == item_id:
                return line.quantity
        return 0

    def add(self, item: MenuItem, qty: int = 1) -> None:
        if qty <= 0:
            raise ValueError("The quantity must be a positive number.")
        if not item.available:
            raise ValueError(f"{item.name} is currently unavailable")

        for idx, line in enumerate(self._lines):
            if line.id == item.id:
                self._lines[idx] = CartItem(item=line.item, quantity=line.quantity + qty)
                return
        self._lines.append(CartItem(item=item, quantity=qty))

    def update_quantity(self, item_id: str, delta: int) -> None:
        updated: list[CartItem] = []
        for line in self._lines:
            if line.id != item_id:
                updated.append(line)
                continue
            quantity = max(0, line.quantity + delta)
            if quantity > 0:
                updated.append(CartItem(item=line.item, quantity=quantity))
        self._lines = updated

    def remove(self, item_id: str) -> None:
        self._lines = [line for line in self._lines if line.id != item_id]

    def clear(self) -> None:
        self._lines.clear()

    @classmethod
    def reorder(cls, last_order: list[CartItem], menu: list[MenuItem]) -> Cart:
        """Rebuild a cart from a previous order using current menu prices.

        Items no longer on the menu or marked unavailable are skipped.
        """
        current = {item.id: item for item in menu}
        cart = cls()
        for line in last_order:
            item = current.get(line.id)
            if item is None or not item.available:
                continue
            cart.add(item, line.quantity)
        return cart
