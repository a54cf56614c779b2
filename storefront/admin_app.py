"""Operator console: live orders, history, and new-order toasts."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import Header, Static

from storefront.config import BACKUP_DIR, NOTIFICATION_SECONDS, POLL_INTERVAL_SECONDS, STORE_NAME
from storefront.date_range_modal import DateRange, DateRangeModal
from storefront.history import (
    ALL_STATUSES,
    HistoryFilter,
    customer_history_filter,
    customer_order_counts,
    dashboard_stats,
    filter_history,
    search_orders,
)
from storefront.lifecycle import is_terminal, update_order_status
from storefront.models import Order, OrderStatus
from storefront.notifications import NotificationCenter
from storefront.number_modal import NumberEntryModal
from storefront.persistence import Store
from storefront.rendering import format_order_detail, format_order_label, money, toast_message
from storefront.restore_modal import RestoreBackupModal

logger = logging.getLogger(__name__)

STATUS_KEYS: dict[str, OrderStatus] = {
    "c": OrderStatus.CONFIRMED,
    "d": OrderStatus.DELIVERED,
    "x": OrderStatus.CANCELLED,
}

STATUS_FILTER_CYCLE = [ALL_STATUSES, *(status.value for status in OrderStatus)]


def _check_fee(value: str) -> str | None:
    if not value:
        return "Delivery fee is required."
    return None


class OrderDeskApp(App):
    """A Textual app for triaging incoming storefront orders."""

    TITLE = STORE_NAME
    SUB_TITLE = "Order Desk"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #orders-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #detail-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #orders-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-detail {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #stats {
        height: auto;
        margin-top: 1;
        color: $text-muted;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    active_view = reactive("orders")
    search_text = reactive("")
    selected_index = reactive(None)

    BINDINGS = [
        ("escape", "dismiss_notification", "Dismiss toast"),
        ("backspace", "backspace_query", "Delete query char"),
        ("enter", "finish_search", "Keep search"),
        Binding("ctrl+e", "export_backup", "Export backup", priority=True),
        Binding("ctrl+r", "restore_backup", "Restore backup", priority=True),
        ("ctrl+c", "cancel_search", "Clear search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, store: Store | None = None, poll_interval: float = POLL_INTERVAL_SECONDS) -> None:
        super().__init__()
        self.store = store or Store()
        self.poll_interval = poll_interval
        self.history_filter = HistoryFilter()
        self.system_status = ""
        self._poll_timer: Timer | None = None
        self.center = NotificationCenter(
            self.store,
            schedule=self.set_timer,
            on_show=self._show_toast,
            on_clear=self.clear_notifications,
            on_orders_changed=lambda _orders: self._refresh_all(),
        )

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="orders-pane"):
                yield Static("Live Orders", id="orders-title", classes="pane-title")
                yield Static(id="search-bar")
                yield Static("(no orders yet)", id="orders-list")
            with Vertical(id="detail-pane"):
                yield Static("Order", classes="pane-title")
                yield Static(id="order-detail")
                yield Static(id="stats")

    def on_mount(self) -> None:
        self.store.bootstrap_schema()
        self._refresh_all()
        self.push_screen(
            NumberEntryModal(
                "Admin Login",
                "Enter the admin PIN to open the order desk",
                self._check_pin,
                max_length=8,
                masked=True,
            ),
            callback=self._unlock,
        )

    def _check_pin(self, value: str) -> str | None:
        if value == self.store.get_admin_pin():
            return None
        logger.warning("rejected admin PIN attempt")
        return "Incorrect PIN"

    def _unlock(self, pin: str | None) -> None:
        if pin is None:
            self.exit()
            return
        self.center.start()
        self._poll_timer = self.set_interval(self.poll_interval, self.center.poll)
        logger.info("order desk unlocked with %d order(s)", len(self.center.orders))
        self._refresh_all()

    def on_unmount(self) -> None:
        self.shutdown_pipeline()

    def shutdown_pipeline(self) -> None:
        """Stop polling and drop any pending toast timers."""
        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer = None
        self.center.stop()

    # -- notifications -------------------------------------------------------

    def _show_toast(self, order: Order) -> None:
        self.bell()
        self.notify(toast_message(order), title=f"New Order {order.id}", timeout=NOTIFICATION_SECONDS)
        self._refresh_header()

    def action_dismiss_notification(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        self.center.dismiss()

    # -- keyboard ------------------------------------------------------------

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        if self.input_state == "search":
            if event.is_printable and event.character and len(event.character) == 1:
                self.search_text += event.character
                self.selected_index = 0
                self._refresh_all()
                event.stop()
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        key = event.character.lower()
        if key == "/":
            self.input_state = "search"
            self._refresh_all()
            event.stop()
            return

        handlers = {
            "j": lambda: self._move_selection(1),
            "k": lambda: self._move_selection(-1),
            "v": self._toggle_view,
            "p": self._open_customer_history,
            "s": self._cycle_status_filter,
            "f": self._open_date_range,
            "r": self._poll_now,
            "$": self._open_delivery_fee,
        }
        if key in STATUS_KEYS:
            self._set_selected_status(STATUS_KEYS[key])
            event.stop()
            return
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    def action_backspace_query(self) -> None:
        if self.input_state != "search" or not self.search_text:
            return
        self.search_text = self.search_text[:-1]
        self.selected_index = 0
        self._refresh_all()

    def action_finish_search(self) -> None:
        if self.input_state != "search":
            return
        self.input_state = "normal"
        self._refresh_all()

    def action_cancel_search(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "normal" and not self.search_text:
            return
        self.input_state = "normal"
        self.search_text = ""
        self.selected_index = 0
        self._refresh_all()

    # -- operator actions ----------------------------------------------------

    def _set_selected_status(self, status: OrderStatus) -> None:
        order = self._selected_order()
        if order is None:
            return
        if order.status == status:
            return
        if is_terminal(order.status):
            self.system_status = f"{order.id} is already {order.status.value}"
            self._refresh_search_bar()
            return

        if update_order_status(self.store, order.id, status):
            self.system_status = f"{order.id} marked {status.value}"
        else:
            self.system_status = f"{order.id} no longer exists"
            self.center.poll()
        self._refresh_all()

    def _toggle_view(self) -> None:
        if self.active_view == "orders":
            self.active_view = "history"
        else:
            self.active_view = "orders"
            self.center.acknowledge()
        self.history_filter = replace(self.history_filter, phone=None)
        self.search_text = ""
        self.input_state = "normal"
        self.selected_index = 0
        self._refresh_all()

    def _open_customer_history(self) -> None:
        order = self._selected_order()
        if order is None:
            return
        self.history_filter = customer_history_filter(order)
        self.search_text = ""
        self.active_view = "history"
        self.input_state = "normal"
        self.selected_index = 0
        self._refresh_all()

    def _cycle_status_filter(self) -> None:
        if self.active_view != "history":
            return
        idx = STATUS_FILTER_CYCLE.index(self.history_filter.status)
        next_status = STATUS_FILTER_CYCLE[(idx + 1) % len(STATUS_FILTER_CYCLE)]
        self.history_filter = self.history_filter.with_status(next_status)
        self.selected_index = 0
        self._refresh_all()

    def _open_date_range(self) -> None:
        if self.active_view != "history":
            return
        self.push_screen(
            DateRangeModal(self.history_filter.start, self.history_filter.end),
            callback=self._apply_date_range,
        )

    def _apply_date_range(self, result: DateRange | None) -> None:
        if result is None:
            return
        start, end = result
        self.history_filter = replace(self.history_filter, start=start, end=end)
        self.selected_index = 0
        self._refresh_all()

    def _poll_now(self) -> None:
        found = self.center.poll()
        self.system_status = f"{len(found)} new order(s)" if found else "No new orders"
        self._refresh_search_bar()

    def _open_delivery_fee(self) -> None:
        self.push_screen(
            NumberEntryModal(
                "Delivery Fee",
                "Fee added to every order, in whole rupees",
                _check_fee,
                initial=str(self.store.get_delivery_fee()),
                max_length=4,
            ),
            callback=self._apply_delivery_fee,
        )

    def _apply_delivery_fee(self, value: str | None) -> None:
        if value is None:
            return
        fee = int(value)
        self.store.set_delivery_fee(fee)
        logger.info("delivery fee set to %d", fee)
        self.system_status = f"Delivery fee set to {money(fee)}"
        self._refresh_search_bar()

    def action_export_backup(self) -> None:
        directory = Path(BACKUP_DIR)
        path = directory / f"storefront-backup-{datetime.now():%Y%m%d-%H%M%S}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(self.store.export_backup(), encoding="utf-8")
        except OSError as exc:
            logger.error("backup export failed: %s", exc)
            self.system_status = f"Export failed: {exc}"
        else:
            logger.info("backup exported to %s", path)
            self.system_status = f"Backup saved: {path}"
        self._refresh_search_bar()

    def action_restore_backup(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        self.push_screen(RestoreBackupModal(), callback=self._apply_restore)

    def _apply_restore(self, path: Path | None) -> None:
        if path is None:
            return
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            self.system_status = f"Restore failed: {exc}"
            self._refresh_search_bar()
            return

        # Restored orders replace the collection; they are not new arrivals.
        self.center.stop()
        ok = self.store.restore_backup(text)
        self.center.start()
        self.system_status = "Data restored successfully!" if ok else "Invalid backup file."
        self.selected_index = 0
        self._refresh_all()

    # -- view state ----------------------------------------------------------

    def _visible_orders(self) -> list[Order]:
        orders = self.center.orders
        if self.active_view == "orders":
            return search_orders(orders, self.search_text)
        return filter_history(orders, replace(self.history_filter, text=self.search_text))

    def _selected_order(self) -> Order | None:
        orders = self._visible_orders()
        if self.selected_index is None or not (0 <= self.selected_index < len(orders)):
            return None
        return orders[self.selected_index]

    def _move_selection(self, delta: int) -> None:
        orders = self._visible_orders()
        if not orders:
            return

        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(orders) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(orders)
        self._refresh_all()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    # -- rendering -----------------------------------------------------------

    def _refresh_all(self) -> None:
        self._refresh_header()
        self._refresh_orders()
        self._refresh_search_bar()
        self._refresh_detail()

    def _refresh_header(self) -> None:
        unseen = self.center.unseen_count
        self.sub_title = f"Order Desk • {unseen} new" if unseen else "Order Desk"

    def _refresh_orders(self) -> None:
        try:
            title = self.query_one("#orders-title", Static)
            orders_widget = self.query_one("#orders-list", Static)
        except NoMatches:
            return

        title.update("Live Orders" if self.active_view == "orders" else "Order History")
        orders = self._visible_orders()
        if not orders:
            self.selected_index = None
            orders_widget.update("(no orders yet)" if not self.center.orders else "No matching orders")
            return

        if self.selected_index is None or self.selected_index >= len(orders):
            self.selected_index = 0 if self.selected_index is None else len(orders) - 1

        counts = customer_order_counts(self.center.orders)
        visible_rows = self._visible_rows(orders_widget)
        start, end = self._window_bounds(len(orders), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            order = orders[idx]
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_order_label(order, counts[order.user_details.phone]))

        if end < len(orders):
            lines.append("\n⋮", style="dim")

        orders_widget.update(lines)

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return

        text = Text()
        if self.input_state == "search":
            text.append("Search: ", style="bold")
            text.append(f"{self.search_text}|")
            text.append("\nEnter keep. Ctrl+C clear.", style="dim")
            bar.update(text)
            return

        if self.active_view == "orders":
            text.append("/ search id or name. c/d/x confirm/deliver/cancel. p history. v view. $ fee.")
        else:
            flt = self.history_filter
            start = flt.start.isoformat() if flt.start else "…"
            end = flt.end.isoformat() if flt.end else "…"
            text.append(f"Name/phone: {self.search_text or '-'}  Status: {flt.status}  Dates: {start} → {end}")
            if flt.phone:
                text.append(f"  Customer: {flt.phone}", style="bold")
            text.append("\n/ search. s status. f dates. v live view.", style="dim")
        text.append(f"\n{self.system_status or 'Ready'}", style="italic")
        bar.update(text)

    def _refresh_detail(self) -> None:
        try:
            detail = self.query_one("#order-detail", Static)
            stats_widget = self.query_one("#stats", Static)
        except NoMatches:
            return

        order = self._selected_order()
        detail.update(format_order_detail(order) if order is not None else "Select an order with j/k")

        stats = dashboard_stats(self.center.orders)
        stats_widget.update(
            f"Today: {stats.order_count} orders • {money(stats.total_sales)}\n"
            f"Top item: {stats.top_item}\n"
            f"Pending: {stats.status_counts.get(OrderStatus.PENDING.value, 0)}"
        )
