from __future__ import annotations

from datetime import datetime
from typing import Callable

import pytest

from storefront.models import CartItem, MenuItem, Order, OrderStatus, UserDetails
from storefront.persistence import Store

CURRY = MenuItem(id="5", name="Special Veg Curry", price=80, category="Curries")
PARATHA = MenuItem(id="2", name="Aloo Paratha (3pc)", price=100, category="Breads")
ROTI = MenuItem(id="3", name="Jawar Roti (2pc)", price=30, category="Breads")


def ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeScheduler:
    """Records scheduled callbacks so tests can fire them by hand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.stopped]

    def fire_next(self) -> None:
        """Run the oldest timer that has not been stopped."""
        timer = self.live[0]
        timer.stopped = True
        timer.callback()


@pytest.fixture
def store(tmp_path) -> Store:
    store = Store(tmp_path / "storefront.db")
    store.bootstrap_schema()
    return store


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def details() -> UserDetails:
    return UserDetails(name="Asha Rao", phone="9876543210", address="12 Temple Road")


@pytest.fixture
def make_order(details) -> Callable[..., Order]:
    def _make(
        order_id: str,
        timestamp: int,
        name: str | None = None,
        phone: str | None = None,
        status: OrderStatus = OrderStatus.PENDING,
        total: int = 100,
    ) -> Order:
        user = UserDetails(
            name=name or details.name,
            phone=phone or details.phone,
            address=details.address,
        )
        return Order(
            id=order_id,
            items=(CartItem(item=CURRY, quantity=1),),
            total_amount=total,
            user_details=user,
            status=status,
            timestamp=timestamp,
            payment_id="pay_test",
        )

    return _make
