from __future__ import annotations

from datetime import date, datetime

import pytest

from storefront.history import (
    ALL_STATUSES,
    HistoryFilter,
    customer_history_filter,
    customer_label,
    customer_order_counts,
    dashboard_stats,
    filter_history,
    parse_day,
    repeat_order_count,
    search_orders,
)
from storefront.models import OrderStatus
from tests.conftest import ms


@pytest.fixture
def orders(make_order):
    return [
        make_order("#ORD-JAN5", ms(datetime(2024, 1, 5, 9, 15)), name="Meena Iyer", phone="9000000002",
                   status=OrderStatus.DELIVERED, total=240),
        make_order("#ORD-JAN2", ms(datetime(2024, 1, 2, 23, 59, 59)), status=OrderStatus.CONFIRMED, total=150),
        make_order("#ORD-JAN1", ms(datetime(2024, 1, 1, 20, 0)), total=90),
    ]


def ids(found):
    return [order.id for order in found]


def test_date_range_is_inclusive_of_whole_days(orders):
    flt = HistoryFilter(start=date(2024, 1, 2), end=date(2024, 1, 10))
    assert ids(filter_history(orders, flt)) == ["#ORD-JAN5", "#ORD-JAN2"]

    single_day = HistoryFilter(start=date(2024, 1, 2), end=date(2024, 1, 2))
    assert ids(filter_history(orders, single_day)) == ["#ORD-JAN2"]


def test_open_ended_ranges(orders):
    assert ids(filter_history(orders, HistoryFilter(end=date(2024, 1, 1)))) == ["#ORD-JAN1"]
    assert ids(filter_history(orders, HistoryFilter(start=date(2024, 1, 3)))) == ["#ORD-JAN5"]


def test_status_filter(orders):
    flt = HistoryFilter().with_status(OrderStatus.PENDING)
    assert ids(filter_history(orders, flt)) == ["#ORD-JAN1"]
    assert ids(filter_history(orders, flt.with_status(ALL_STATUSES))) == ids(orders)


def test_text_matches_name_case_insensitively_or_phone(orders):
    assert ids(filter_history(orders, HistoryFilter(text="meena"))) == ["#ORD-JAN5"]
    assert ids(filter_history(orders, HistoryFilter(text="98765"))) == ["#ORD-JAN2", "#ORD-JAN1"]
    assert filter_history(orders, HistoryFilter(text="nobody")) == []


def test_empty_filter_returns_everything(orders):
    assert HistoryFilter().is_empty()
    assert filter_history(orders, HistoryFilter()) == orders


def test_search_orders_on_id_or_name(orders):
    assert ids(search_orders(orders, "jan5")) == ["#ORD-JAN5"]
    assert ids(search_orders(orders, "ASHA")) == ["#ORD-JAN2", "#ORD-JAN1"]
    assert search_orders(orders, "  ") == orders


def test_parse_day_rejects_bad_input():
    assert parse_day("2024-01-02") == date(2024, 1, 2)
    with pytest.raises(ValueError):
        parse_day("2024-13-01")


def test_repeat_customer_counts(make_order):
    now = ms(datetime(2024, 2, 1, 10, 0))
    history = [make_order(f"#ORD-R00{n}", now + n) for n in range(3)]
    history.append(make_order("#ORD-ONCE", now, phone="9111111111"))

    counts = customer_order_counts(history)
    assert counts["9876543210"] == 3
    assert counts["9111111111"] == 1
    assert repeat_order_count(history, "9876543210") == 3
    assert customer_label(3) == "Repeat (3)"
    assert customer_label(1) == "First order"


def test_customer_history_filter_scopes_to_phone(orders):
    flt = customer_history_filter(orders[0])
    assert flt.phone == "9000000002"
    assert not flt.is_empty()
    assert ids(filter_history(orders, flt)) == ["#ORD-JAN5"]


def test_customer_history_filter_ignores_longer_numbers_containing_the_phone(orders, make_order):
    lookalike = make_order("#ORD-INTL", ms(datetime(2024, 1, 3, 8, 0)), name="Other", phone="919876543210")
    history = [lookalike, *orders]

    flt = customer_history_filter(orders[1])

    assert ids(filter_history(history, flt)) == ["#ORD-JAN2", "#ORD-JAN1"]
    assert ids(filter_history(history, HistoryFilter(text="9876543210"))) == ["#ORD-INTL", "#ORD-JAN2", "#ORD-JAN1"]


def test_dashboard_stats(orders):
    stats = dashboard_stats(orders, today=date(2024, 1, 5))
    assert stats.total_sales == 240
    assert stats.order_count == 1
    assert stats.top_item == "Special Veg Curry"
    assert stats.status_counts == {"DELIVERED": 1, "CONFIRMED": 1, "PENDING": 1}


def test_dashboard_stats_without_orders():
    stats = dashboard_stats([], today=date(2024, 1, 5))
    assert (stats.total_sales, stats.order_count, stats.top_item) == (0, 0, "N/A")
