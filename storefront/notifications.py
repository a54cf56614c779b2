"""New-order detection and the sequential operator notification queue.

There is no push channel. The host polls ``NotificationCenter.poll`` on a fixed
interval and also whenever the store reports a write to the orders key. Newly
seen orders go into a FIFO queue that shows at most one toast at a time, each
for ``NOTIFICATION_SECONDS`` unless dismissed early.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, Protocol

from storefront.config import NOTIFICATION_SECONDS
from storefront.models import Order
from storefront.persistence import KEY_ORDERS, Store

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Timer]


class ChangeDetector:
    """Diffs the persisted order collection against the last one it saw."""

    def __init__(self, load_orders: Callable[[], list[Order]]) -> None:
        self._load_orders = load_orders
        self._snapshot: list[Order] = []
        self._seen_ids: set[str] = set()

    @property
    def snapshot(self) -> list[Order]:
        return list(self._snapshot)

    def prime(self) -> list[Order]:
        """Take the initial snapshot. Orders already present are never reported."""
        self._replace(self._load_orders())
        return self.snapshot

    def poll(self) -> list[Order]:
        """Return orders whose id was not in the previous snapshot.

        Arrivals come back oldest first. The fresh read is newest first, so
        orders sharing a timestamp are reversed to restore insertion order.
        """
        fresh = self._load_orders()
        new_orders = [order for order in fresh if order.id not in self._seen_ids]
        self._replace(fresh)
        return sorted(reversed(new_orders), key=lambda order: order.timestamp)

    def _replace(self, orders: list[Order]) -> None:
        self._snapshot = list(orders)
        self._seen_ids = {order.id for order in orders}


class NotificationQueue:
    """FIFO of pending orders with a single auto-expiring display slot."""

    def __init__(
        self,
        schedule: Scheduler,
        on_show: Callable[[Order], None] | None = None,
        on_clear: Callable[[], None] | None = None,
        display_seconds: float = NOTIFICATION_SECONDS,
    ) -> None:
        self._schedule = schedule
        self._on_show = on_show
        self._on_clear = on_clear
        self.display_seconds = display_seconds
        self._pending: deque[Order] = deque()
        self._active: Order | None = None
        self._timer: Timer | None = None
        self._generation = 0

    @property
    def active(self) -> Order | None:
        return self._active

    @property
    def pending(self) -> list[Order]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending) + (1 if self._active is not None else 0)

    def enqueue(self, orders: Iterable[Order]) -> None:
        self._pending.extend(orders)
        self._advance()

    def dismiss(self) -> None:
        """Clear the visible notification now; the next queued one follows."""
        if self._active is None:
            return
        self._clear_active()
        self._advance()

    def close(self) -> None:
        """Stop the display timer and drop everything queued."""
        self._pending.clear()
        if self._active is not None:
            self._clear_active()

    def _advance(self) -> None:
        if self._active is not None or not self._pending:
            return
        self._active = self._pending.popleft()
        self._generation += 1
        generation = self._generation
        self._timer = self._schedule(self.display_seconds, lambda: self._expire(generation))
        if self._on_show is not None:
            self._on_show(self._active)

    def _expire(self, generation: int) -> None:
        # A timer that fires after a manual dismiss belongs to an older slot.
        if generation != self._generation or self._active is None:
            return
        self._timer = None
        self._clear_active()
        self._advance()

    def _clear_active(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._active = None
        self._generation += 1
        if self._on_clear is not None:
            self._on_clear()


class NotificationCenter:
    """Owns the detector, the queue and the unseen-order badge for one operator session."""

    def __init__(
        self,
        store: Store,
        schedule: Scheduler,
        on_show: Callable[[Order], None] | None = None,
        on_clear: Callable[[], None] | None = None,
        on_orders_changed: Callable[[list[Order]], None] | None = None,
    ) -> None:
        self.store = store
        self.detector = ChangeDetector(store.get_orders)
        self.queue = NotificationQueue(schedule, on_show=on_show, on_clear=on_clear)
        self.unseen_count = 0
        self.orders: list[Order] = []
        self._on_orders_changed = on_orders_changed
        self._started = False
        self._polling = False
        self._poll_requested = False

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.orders = self.detector.prime()
        self.store.add_listener(self.on_storage_changed)
        self._notify_orders_changed()

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        self.store.remove_listener(self.on_storage_changed)
        self.queue.close()

    def poll(self) -> list[Order]:
        """Detect arrivals since the last poll and queue them for display."""
        if self._polling:
            # A write during our own read (the retention sweep) asks for another pass.
            self._poll_requested = True
            return []

        self._polling = True
        new_orders: list[Order] = []
        try:
            while True:
                self._poll_requested = False
                before = self.orders
                detected = self.detector.poll()
                self.orders = self.detector.snapshot
                new_orders.extend(detected)
                if detected or before != self.orders:
                    self._notify_orders_changed()
                if not self._poll_requested:
                    break
        finally:
            self._polling = False

        if new_orders:
            self.unseen_count += len(new_orders)
            logger.info("detected %d new order(s): %s", len(new_orders), ", ".join(o.id for o in new_orders))
            self.queue.enqueue(new_orders)
        return new_orders

    def on_storage_changed(self, key: str) -> None:
        if key == KEY_ORDERS and self._started:
            self.poll()

    def acknowledge(self) -> None:
        """Operator opened the order list; reset the unseen badge."""
        self.unseen_count = 0

    def dismiss(self) -> None:
        self.queue.dismiss()

    def _notify_orders_changed(self) -> None:
        if self._on_orders_changed is not None:
            self._on_orders_changed(self.orders)
