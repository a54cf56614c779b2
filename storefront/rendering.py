"""Rendering helpers for the operator console."""

from __future__ import annotations

from rich.text import Text

from storefront.constant import STATUS_BADGE_STYLES
from storefront.history import customer_label, order_datetime
from storefront.models import Order, OrderStatus

CURRENCY = "₹"


def money(amount: int) -> str:
    return f"{CURRENCY}{amount}"


def badge_style(status: OrderStatus) -> str:
    """Return a consistent badge style for status tags."""
    return STATUS_BADGE_STYLES.get(status.value, "bold #ffffff on #555555")


def format_order_label(order: Order, order_count: int | None = None) -> Text:
    """One-line order summary with a colored status tag."""
    text = Text()
    text.append(f" {order.status.value} ", style=badge_style(order.status))
    text.append(f" {order.id} ", style="bold")
    text.append(order.user_details.name)
    text.append(f"  {order.item_count} items • {money(order.total_amount)}", style="dim")
    if order_count is not None:
        style = "bold #5fbf72" if order_count > 1 else "#9ecbff"
        text.append(f"  [{customer_label(order_count)}]", style=style)
    return text


def format_order_detail(order: Order) -> Text:
    """Multi-line view of one order for the detail pane."""
    details = order.user_details
    text = Text()
    text.append(f"{order.id}", style="bold")
    text.append("  ")
    text.append(f" {order.status.value} ", style=badge_style(order.status))
    text.append(f"\n{order_datetime(order):%Y-%m-%d %H:%M}\n\n", style="dim")

    text.append(f"{details.name}  {details.phone}\n")
    text.append(f"{details.address}\n")
    if details.delivery_instructions:
        text.append(f"Note: {details.delivery_instructions}\n", style="italic")
    if details.coordinates is not None:
        text.append(f"Pin: {details.coordinates.lat:.5f}, {details.coordinates.lng:.5f}\n", style="dim")

    text.append("\n")
    for line in order.items:
        text.append(f"{line.quantity} x {line.name}")
        text.append(f"  {money(line.subtotal)}\n", style="dim")
    text.append(f"\nTotal {money(order.total_amount)}", style="bold")
    if order.payment_id:
        text.append(f"\nPayment {order.payment_id}", style="dim")
    return text


def toast_message(order: Order) -> str:
    return f"{order.user_details.name}\n{order.item_count} items • {money(order.total_amount)}"
