"""SQLite-backed key/value persistence for orders, catalog and settings."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from storefront.config import DB_PATH, INITIAL_PIN, RETENTION_DAYS
from storefront.data import DEFAULT_CATEGORY_IMAGES, DEFAULT_MENU
from storefront.models import Banner, CartItem, MenuItem, Order, UserProfile

logger = logging.getLogger(__name__)

KEY_MENU = "st_menu"
KEY_ORDERS = "st_orders"
KEY_PIN = "st_admin_pin"
KEY_DELIVERY_FEE = "st_delivery_fee"
KEY_LAST_ORDER = "st_last_order"
KEY_CURRENT_USER = "st_current_user"
KEY_BANNERS = "st_banners"
KEY_FAVORITES = "st_favorites"
KEY_CATEGORY_IMAGES = "st_category_images"

RETENTION_MS = RETENTION_DAYS * 24 * 60 * 60 * 1000

_MISSING = object()

StorageListener = Callable[[str], None]


def now_ms() -> int:
    return int(time.time() * 1000)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_orders(raw: Any) -> list[Order]:
    if not isinstance(raw, list):
        logger.warning("stored orders are not a list; treating as empty")
        return []
    orders: list[Order] = []
    for record in raw:
        try:
            orders.append(Order.from_dict(record))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("skipping malformed order record: %s", exc)
    return orders


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.timestamp, reverse=True)


def apply_retention(orders: list[Order], now: int) -> list[Order]:
    """Drop orders whose age reaches the retention window."""
    return [order for order in orders if now - order.timestamp < RETENTION_MS]


class Store:
    """Named JSON documents in one SQLite table.

    Each key is written atomically. ``mutate`` wraps a read-modify-write of one
    key in a single immediate transaction so concurrent writers serialize.
    """

    # Returned from a ``mutate`` callback to skip the write.
    UNCHANGED = _MISSING

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)
        self._listeners: list[StorageListener] = []
        self._schema_ready = False

    def _connect(self) -> sqlite3.Connection:
        if not self._schema_ready:
            self.bootstrap_schema()
        return self._open()

    def _open(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path, isolation_level=None, timeout=5.0)

    def bootstrap_schema(self) -> None:
        """Create the key/value table if it does not already exist."""
        self._schema_ready = True
        with closing(self._open()) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    # -- change signal -----------------------------------------------------

    def add_listener(self, listener: StorageListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: StorageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, keys: list[str]) -> None:
        for key in keys:
            for listener in list(self._listeners):
                listener(key)

    # -- raw key/value -----------------------------------------------------

    def _read_raw(self, conn: sqlite3.Connection, key: str) -> str | None:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else row[0]

    def _write_raw(self, conn: sqlite3.Connection, key: str, value: Any) -> None:
        conn.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, json.dumps(value, ensure_ascii=False), _utc_now_iso()),
        )

    def _decode(self, key: str, text: str | None, default: Any) -> Any:
        if text is None:
            return default
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("stored value for %s is not valid JSON; using default", key)
            return default

    def get(self, key: str, default: Any = None) -> Any:
        with closing(self._connect()) as conn:
            text = self._read_raw(conn, key)
        return self._decode(key, text, default)

    def save(self, key: str, value: Any) -> None:
        self.save_many({key: value})

    def save_many(self, values: dict[str, Any]) -> None:
        """Write several keys in one transaction."""
        if not values:
            return
        with closing(self._connect()) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                for key, value in values.items():
                    self._write_raw(conn, key, value)
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        self._emit(list(values))

    def delete(self, key: str) -> None:
        with closing(self._connect()) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._emit([key])

    def mutate(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Apply ``fn`` to the stored value and persist its result atomically.

        ``fn`` may return ``Store.UNCHANGED`` to leave the key as it is.
        """
        with closing(self._connect()) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                current = self._decode(key, self._read_raw(conn, key), default)
                result = fn(current)
                if result is not Store.UNCHANGED:
                    self._write_raw(conn, key, result)
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        if result is not Store.UNCHANGED:
            self._emit([key])
        return result

    # -- orders ------------------------------------------------------------

    def get_orders(self, now: int | None = None) -> list[Order]:
        """Return retained orders, newest first.

        Orders older than the retention window are removed from storage as a
        side effect of reading.
        """
        now = now_ms() if now is None else now
        orders = _parse_orders(self.get(KEY_ORDERS, []))
        retained = apply_retention(orders, now)
        if len(retained) != len(orders):
            pruned = len(orders) - len(retained)

            def _prune(raw: Any) -> Any:
                current = apply_retention(_parse_orders(raw), now)
                return [order.to_dict() for order in current]

            self.mutate(KEY_ORDERS, _prune, [])
            logger.info("retention sweep removed %d order(s)", pruned)
        return _newest_first(retained)

    def save_order(self, order: Order) -> None:
        """Prepend ``order`` to the stored collection."""

        def _prepend(raw: Any) -> Any:
            existing = raw if isinstance(raw, list) else []
            return [order.to_dict(), *existing]

        self.mutate(KEY_ORDERS, _prepend, [])
        logger.info("saved order %s total=%d", order.id, order.total_amount)

    def update_order(self, order: Order) -> bool:
        """Replace the stored record with the same id. Returns False if absent."""
        return self.update_order_record(order.id, lambda _record: order.to_dict()) is not None

    def update_order_record(self, order_id: str, fn: Callable[[dict[str, Any]], dict[str, Any]]) -> Order | None:
        """Re-read, transform and persist one raw order record inside a transaction.

        ``fn`` receives a copy of the stored record; keys it does not touch are
        written back exactly as they were read.
        """
        updated: list[Order] = []

        def _apply(raw: Any) -> Any:
            if not isinstance(raw, list):
                return Store.UNCHANGED
            for idx, record in enumerate(raw):
                if not isinstance(record, dict) or record.get("id") != order_id:
                    continue
                new_record = fn(dict(record))
                try:
                    updated.append(Order.from_dict(new_record))
                except (ValueError, TypeError, AttributeError) as exc:
                    logger.warning("order %s is malformed, not updating: %s", order_id, exc)
                    return Store.UNCHANGED
                result = list(raw)
                result[idx] = new_record
                return result
            return Store.UNCHANGED

        self.mutate(KEY_ORDERS, _apply, [])
        return updated[0] if updated else None

    # -- catalog and settings ----------------------------------------------

    def get_menu(self) -> list[MenuItem]:
        raw = self.get(KEY_MENU)
        if raw is None:
            return list(DEFAULT_MENU)
        try:
            return [MenuItem.from_dict(item) for item in raw]
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("stored menu is malformed (%s); using built-in menu", exc)
            return list(DEFAULT_MENU)

    def save_menu(self, menu: list[MenuItem]) -> None:
        self.save(KEY_MENU, [item.to_dict() for item in menu])

    def get_admin_pin(self) -> str:
        pin = self.get(KEY_PIN)
        if not _is_pin(pin):
            return INITIAL_PIN
        return pin

    def set_admin_pin(self, pin: str) -> None:
        if not _is_pin(pin):
            raise ValueError("admin PIN must be digits only")
        self.save(KEY_PIN, pin)

    def get_delivery_fee(self) -> int:
        fee = self.get(KEY_DELIVERY_FEE, 0)
        if not _is_fee(fee):
            logger.warning("stored delivery fee %r is invalid; using 0", fee)
            return 0
        return fee

    def set_delivery_fee(self, fee: int) -> None:
        if not _is_fee(fee):
            raise ValueError("delivery fee must be a non-negative whole number")
        self.save(KEY_DELIVERY_FEE, fee)

    def get_banners(self) -> list[Banner]:
        raw = self.get(KEY_BANNERS, [])
        try:
            return [Banner.from_dict(item) for item in raw]
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("stored banners are malformed (%s); using none", exc)
            return []

    def save_banners(self, banners: list[Banner]) -> None:
        self.save(KEY_BANNERS, [banner.to_dict() for banner in banners])

    def get_category_images(self) -> dict[str, str]:
        stored = self.get(KEY_CATEGORY_IMAGES, {})
        if not isinstance(stored, dict):
            return dict(DEFAULT_CATEGORY_IMAGES)
        return {**DEFAULT_CATEGORY_IMAGES, **stored}

    def save_category_images(self, images: dict[str, str]) -> None:
        self.save(KEY_CATEGORY_IMAGES, dict(images))

    def get_last_order(self) -> list[CartItem]:
        raw = self.get(KEY_LAST_ORDER, [])
        try:
            return [CartItem.from_dict(line) for line in raw]
        except (ValueError, TypeError, AttributeError):
            return []

    def save_last_order(self, lines: list[CartItem]) -> None:
        self.save(KEY_LAST_ORDER, [line.to_dict() for line in lines])

    def get_current_user(self) -> UserProfile | None:
        raw = self.get(KEY_CURRENT_USER)
        if raw is None:
            return None
        try:
            return UserProfile.from_dict(raw)
        except (ValueError, TypeError, AttributeError):
            logger.warning("stored user profile is malformed; ignoring it")
            return None

    def save_current_user(self, profile: UserProfile) -> None:
        self.save(KEY_CURRENT_USER, profile.to_dict())

    def logout_user(self) -> None:
        self.delete(KEY_CURRENT_USER)

    def get_favorites(self) -> list[str]:
        raw = self.get(KEY_FAVORITES, [])
        if not isinstance(raw, list):
            return []
        return [str(item_id) for item_id in raw]

    def toggle_favorite(self, item_id: str) -> bool:
        """Flip ``item_id`` in the favorites list. Returns True when added."""
        added: list[bool] = []

        def _toggle(raw: Any) -> Any:
            favorites = [str(x) for x in raw] if isinstance(raw, list) else []
            if item_id in favorites:
                added.append(False)
                return [x for x in favorites if x != item_id]
            added.append(True)
            return [*favorites, item_id]

        self.mutate(KEY_FAVORITES, _toggle, [])
        return added[0]

    # -- backup ------------------------------------------------------------

    def export_backup(self, now: int | None = None) -> str:
        data = {
            "menu": [item.to_dict() for item in self.get_menu()],
            "orders": [order.to_dict() for order in self.get_orders(now=now)],
            "banners": [banner.to_dict() for banner in self.get_banners()],
            "pin": self.get_admin_pin(),
            "deliveryFee": self.get_delivery_fee(),
            "categoryImages": self.get_category_images(),
            "createdAt": now_ms() if now is None else now,
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def restore_backup(self, text: str) -> bool:
        """Replace every field present in the backup. Returns False on bad input.

        Nothing is written unless the whole document validates.
        """
        try:
            data = json.loads(text)
            values = _validate_backup(data)
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Restore failed: %s", exc)
            return False

        self.save_many(values)
        logger.info("restored backup fields: %s", ", ".join(sorted(values)) or "(none)")
        return True


def _validate_backup(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("backup must be a JSON object")

    values: dict[str, Any] = {}
    if "menu" in data:
        values[KEY_MENU] = [MenuItem.from_dict(item).to_dict() for item in _as_list(data["menu"], "menu")]
    if "orders" in data:
        values[KEY_ORDERS] = [Order.from_dict(order).to_dict() for order in _as_list(data["orders"], "orders")]
    if "banners" in data:
        values[KEY_BANNERS] = [Banner.from_dict(item).to_dict() for item in _as_list(data["banners"], "banners")]
    if "pin" in data:
        if not _is_pin(data["pin"]):
            raise ValueError("pin must be a string of digits")
        values[KEY_PIN] = data["pin"]
    if "deliveryFee" in data:
        fee = data["deliveryFee"]
        if not _is_fee(fee):
            raise ValueError("deliveryFee must be a non-negative whole number")
        values[KEY_DELIVERY_FEE] = fee
    if "categoryImages" in data:
        images = data["categoryImages"]
        if not isinstance(images, dict) or not all(isinstance(v, str) for v in images.values()):
            raise ValueError("categoryImages must map names to URLs")
        values[KEY_CATEGORY_IMAGES] = images
    return values


def _as_list(value: Any, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{name} must be a list")
    return value


def _is_fee(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_pin(value: Any) -> bool:
    return isinstance(value, str) and value.isdigit()
