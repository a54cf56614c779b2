"""Domain models for the storefront order pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


def _require(data: Any, key: str, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    value = data.get(key)
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass; numeric fields must not accept it.
    if isinstance(value, bool) and bool not in kinds:
        raise ValueError(f"field {key!r} has wrong type")
    if not isinstance(value, kinds):
        raise ValueError(f"field {key!r} is missing or has wrong type")
    return value


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class MenuItem:
    """A catalog entry. Prices are integers in the smallest currency unit."""

    id: str
    name: str
    price: int
    category: str
    available: bool = True
    is_veg: bool = True
    description: str | None = None
    image_url: str | None = None
    rating: float | None = None
    votes: int | None = None
    is_bestseller: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "price": self.price,
                "category": self.category,
                "available": self.available,
                "isVeg": self.is_veg,
                "description": self.description,
                "imageUrl": self.image_url,
                "rating": self.rating,
                "votes": self.votes,
                "isBestseller": self.is_bestseller,
            }
        )

    @classmethod
    def from_dict(cls, data: Any) -> MenuItem:
        price = _require(data, "price", int)
        if price < 0:
            raise ValueError("price must be non-negative")
        return cls(
            id=str(_require(data, "id", (str, int))),
            name=_require(data, "name", str),
            price=price,
            category=str(data.get("category") or "Other"),
            available=bool(data.get("available", True)),
            is_veg=bool(data.get("isVeg", True)),
            description=data.get("description"),
            image_url=data.get("imageUrl"),
            rating=data.get("rating"),
            votes=data.get("votes"),
            is_bestseller=data.get("isBestseller"),
        )


@dataclass(frozen=True)
class CartItem:
    """A frozen menu snapshot plus a quantity of at least one."""

    item: MenuItem
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def price(self) -> int:
        return self.item.price

    @property
    def subtotal(self) -> int:
        return self.item.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["quantity"] = self.quantity
        return data

    @classmethod
    def from_dict(cls, data: Any) -> CartItem:
        quantity = _require(data, "quantity", int)
        return cls(item=MenuItem.from_dict(data), quantity=quantity)


@dataclass(frozen=True)
class Coupon:
    code: str
    description: str = ""
    discount_amount: int | None = None
    discount_percent: int | None = None
    max_discount: int | None = None
    min_order: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Coupon:
        return cls(
            code=str(data["code"]).upper(),
            description=str(data.get("description", "")),
            discount_amount=data.get("discountAmount"),
            discount_percent=data.get("discountPercent"),
            max_discount=data.get("maxDiscount"),
            min_order=int(data.get("minOrder") or 0),
        )


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class UserDetails:
    """Delivery details captured at checkout."""

    name: str
    phone: str
    address: str
    email: str | None = None
    delivery_instructions: str | None = None
    coordinates: Coordinates | None = None

    def to_dict(self) -> dict[str, Any]:
        coords = None
        if self.coordinates is not None:
            coords = {"lat": self.coordinates.lat, "lng": self.coordinates.lng}
        return _drop_none(
            {
                "name": self.name,
                "phone": self.phone,
                "address": self.address,
                "email": self.email,
                "deliveryInstructions": self.delivery_instructions,
                "coordinates": coords,
            }
        )

    @classmethod
    def from_dict(cls, data: Any) -> UserDetails:
        coords = None
        raw_coords = data.get("coordinates") if isinstance(data, dict) else None
        if raw_coords is not None:
            coords = Coordinates(
                lat=float(_require(raw_coords, "lat", (int, float))),
                lng=float(_require(raw_coords, "lng", (int, float))),
            )
        return cls(
            name=_require(data, "name", str),
            phone=str(_require(data, "phone", (str, int))),
            address=str(data.get("address") or ""),
            email=data.get("email"),
            delivery_instructions=data.get("deliveryInstructions"),
            coordinates=coords,
        )


@dataclass(frozen=True)
class UserProfile:
    """Persisted session identity keyed by phone number."""

    id: str
    details: UserDetails
    joined_at: int

    def to_dict(self) -> dict[str, Any]:
        data = self.details.to_dict()
        data["id"] = self.id
        data["joinedAt"] = self.joined_at
        return data

    @classmethod
    def from_dict(cls, data: Any) -> UserProfile:
        return cls(
            id=str(_require(data, "id", (str, int))),
            details=UserDetails.from_dict(data),
            joined_at=_require(data, "joinedAt", int),
        )


@dataclass(frozen=True)
class Banner:
    id: str
    image_url: str
    active: bool = True
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({"id": self.id, "imageUrl": self.image_url, "active": self.active, "title": self.title})

    @classmethod
    def from_dict(cls, data: Any) -> Banner:
        return cls(
            id=str(_require(data, "id", (str, int))),
            image_url=_require(data, "imageUrl", str),
            active=bool(data.get("active", True)),
            title=data.get("title"),
        )


@dataclass(frozen=True)
class Order:
    """A priced, persisted order. Only ``status`` ever changes after creation."""

    id: str
    items: tuple[CartItem, ...]
    total_amount: int
    user_details: UserDetails
    status: OrderStatus
    timestamp: int
    payment_id: str | None = None

    @property
    def item_count(self) -> int:
        return len(self.items)

    def with_status(self, status: OrderStatus) -> Order:
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "items": [line.to_dict() for line in self.items],
                "totalAmount": self.total_amount,
                "userDetails": self.user_details.to_dict(),
                "status": self.status.value,
                "timestamp": self.timestamp,
                "paymentId": self.payment_id,
            }
        )

    @classmethod
    def from_dict(cls, data: Any) -> Order:
        items = _require(data, "items", list)
        return cls(
            id=_require(data, "id", str),
            items=tuple(CartItem.from_dict(line) for line in items),
            total_amount=_require(data, "totalAmount", int),
            user_details=UserDetails.from_dict(_require(data, "userDetails", dict)),
            status=OrderStatus(_require(data, "status", str)),
            timestamp=_require(data, "timestamp", int),
            payment_id=data.get("paymentId"),
        )


@dataclass(frozen=True)
class Bill:
    """Price breakdown for one cart. ``final_total`` is the charge amount."""

    item_total: int
    platform_fee: int
    delivery_fee: int
    gst: int
    discount: int
    final_total: int
    coupon: Coupon | None = None


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of the external payment handshake."""

    ok: bool
    payment_reference: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, payment_reference: str) -> PaymentResult:
        return cls(ok=True, payment_reference=payment_reference)

    @classmethod
    def failure(cls, reason: str) -> PaymentResult:
        return cls(ok=False, reason=reason)


@dataclass
class DashboardStats:
    total_sales: int
    order_count: int
    top_item: str
    status_counts: dict[str, int] = field(default_factory=dict)
