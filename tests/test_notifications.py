from __future__ import annotations

import time

import pytest

from storefront.models import Order
from storefront.notifications import ChangeDetector, NotificationCenter, NotificationQueue

NOW = int(time.time() * 1000)


class Shown:
    def __init__(self) -> None:
        self.events: list[str] = []

    def show(self, order: Order) -> None:
        self.events.append(f"show {order.id}")

    def clear(self) -> None:
        self.events.append("clear")


@pytest.fixture
def shown() -> Shown:
    return Shown()


@pytest.fixture
def queue(scheduler, shown) -> NotificationQueue:
    return NotificationQueue(scheduler, on_show=shown.show, on_clear=shown.clear, display_seconds=3.5)


def test_detector_reports_arrivals_oldest_first(make_order):
    a = make_order("#ORD-AAAA", NOW)
    b = make_order("#ORD-BBBB", NOW + 1)
    c = make_order("#ORD-CCCC", NOW + 2)
    reads = [[a], [c, b, a]]
    detector = ChangeDetector(lambda: reads.pop(0))

    assert detector.prime() == [a]
    assert [order.id for order in detector.poll()] == ["#ORD-BBBB", "#ORD-CCCC"]


def test_detector_reports_same_millisecond_orders_in_placement_order(store, make_order):
    store.save_order(make_order("#ORD-AAAA", NOW))
    detector = ChangeDetector(store.get_orders)
    detector.prime()

    store.save_order(make_order("#ORD-BBBB", NOW + 5))
    store.save_order(make_order("#ORD-CCCC", NOW + 5))

    assert [order.id for order in detector.poll()] == ["#ORD-BBBB", "#ORD-CCCC"]


def test_detector_ignores_shrinking_collection(make_order):
    a = make_order("#ORD-AAAA", NOW)
    b = make_order("#ORD-BBBB", NOW + 1)
    reads = [[b, a], [a], [a]]
    detector = ChangeDetector(lambda: reads.pop(0))
    detector.prime()

    assert detector.poll() == []
    assert detector.snapshot == [a]
    assert detector.poll() == []


def test_queue_shows_one_at_a_time(queue, scheduler, shown, make_order):
    queue.enqueue([make_order(f"#ORD-000{n}", NOW + n) for n in range(3)])

    assert shown.events == ["show #ORD-0000"]
    assert len(scheduler.live) == 1
    assert scheduler.live[0].delay == 3.5
    assert len(queue) == 3

    scheduler.fire_next()
    assert shown.events[-2:] == ["clear", "show #ORD-0001"]
    scheduler.fire_next()
    scheduler.fire_next()

    assert shown.events == [
        "show #ORD-0000",
        "clear",
        "show #ORD-0001",
        "clear",
        "show #ORD-0002",
        "clear",
    ]
    assert queue.active is None
    assert scheduler.live == []


def test_dismiss_advances_and_cancels_timer(queue, scheduler, shown, make_order):
    queue.enqueue([make_order("#ORD-AAAA", NOW), make_order("#ORD-BBBB", NOW + 1)])
    first_timer = scheduler.timers[0]

    queue.dismiss()

    assert first_timer.stopped
    assert queue.active.id == "#ORD-BBBB"
    assert shown.events == ["show #ORD-AAAA", "clear", "show #ORD-BBBB"]


def test_stale_expiry_after_dismiss_is_ignored(queue, scheduler, make_order):
    queue.enqueue([make_order("#ORD-AAAA", NOW), make_order("#ORD-BBBB", NOW + 1)])
    stale = scheduler.timers[0]
    queue.dismiss()

    stale.callback()

    assert queue.active.id == "#ORD-BBBB"


def test_dismiss_with_nothing_showing_is_harmless(queue, shown):
    queue.dismiss()
    assert shown.events == []


def test_center_counts_unseen_and_acknowledges(store, scheduler, shown, make_order):
    store.save_order(make_order("#ORD-AAAA", NOW))
    changes: list[list[Order]] = []
    center = NotificationCenter(store, scheduler, on_show=shown.show, on_clear=shown.clear, on_orders_changed=changes.append)
    center.start()

    assert center.unseen_count == 0
    assert [order.id for order in center.orders] == ["#ORD-AAAA"]

    # Saving through the same store signals the center, which polls immediately.
    store.save_order(make_order("#ORD-BBBB", NOW + 1))
    store.save_order(make_order("#ORD-CCCC", NOW + 2))

    assert center.unseen_count == 2
    assert shown.events == ["show #ORD-BBBB"]
    assert [order.id for order in changes[-1]] == ["#ORD-CCCC", "#ORD-BBBB", "#ORD-AAAA"]

    center.acknowledge()
    assert center.unseen_count == 0

    center.dismiss()
    assert shown.events[-1] == "show #ORD-CCCC"


def test_center_ignores_unrelated_keys_and_stops_listening(store, scheduler, shown, make_order):
    center = NotificationCenter(store, scheduler, on_show=shown.show, on_clear=shown.clear)
    center.start()
    store.set_delivery_fee(10)
    assert center.unseen_count == 0

    center.stop()
    store.save_order(make_order("#ORD-AAAA", NOW))

    assert center.unseen_count == 0
    assert shown.events == []
    assert [order.id for order in center.poll()] == ["#ORD-AAAA"]


def test_poll_without_changes_reports_nothing(store, scheduler, make_order):
    store.save_order(make_order("#ORD-AAAA", NOW))
    center = NotificationCenter(store, scheduler)
    center.start()

    assert center.poll() == []
    assert center.unseen_count == 0
