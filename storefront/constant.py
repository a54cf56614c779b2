"""Editable static catalog, coupon and image configuration."""

from __future__ import annotations

INITIAL_MENU: list[dict[str, object]] = [
    {
        "id": "1",
        "name": "Cholle Puri",
        "price": 80,
        "description": "Classic Punjabi style spicy chickpeas served with fluffy fried bread.",
        "imageUrl": "https://images.unsplash.com/photo-1626132647523-66f5bf380027?q=80&w=800&auto=format&fit=crop",
        "available": True,
        "category": "Recommended",
        "isVeg": True,
        "rating": 4.5,
        "votes": 128,
        "isBestseller": True,
    },
    {
        "id": "2",
        "name": "Aloo Paratha (3pc)",
        "price": 100,
        "description": "Golden flatbread stuffed with spiced mashed potatoes, served with curd and pickle.",
        "imageUrl": "https://images.unsplash.com/photo-1626074353765-517a681e40be?q=80&w=800&auto=format&fit=crop",
        "available": True,
        "category": "Breads",
        "isVeg": True,
        "rating": 4.3,
        "votes": 85,
        "isBestseller": True,
    },
    {
        "id": "3",
        "name": "Jawar Roti (2pc)",
        "price": 30,
        "description": "Traditional sorghum flatbread, handmade and gluten-free.",
        "imageUrl": "https://cdn.pixabay.com/photo/2023/09/24/14/05/bread-8273030_1280.jpg",
        "available": True,
        "category": "Breads",
        "isVeg": True,
        "rating": 4.0,
        "votes": 42,
    },
    {
        "id": "4",
        "name": "Ashirwad Chapathi (2pc)",
        "price": 30,
        "description": "Soft whole wheat chapathis made home-style without oil.",
        "imageUrl": "https://images.unsplash.com/photo-1565557623262-b51c2513a641?q=80&w=800&auto=format&fit=crop",
        "available": True,
        "category": "Breads",
        "isVeg": True,
        "rating": 4.1,
        "votes": 56,
    },
    {
        "id": "5",
        "name": "Special Veg Curry",
        "price": 80,
        "description": "Seasonal mixed vegetables in a rich tomato and onion gravy.",
        "imageUrl": "https://images.unsplash.com/photo-1546833999-b9f581a1996d?q=80&w=800&auto=format&fit=crop",
        "available": True,
        "category": "Curries",
        "isVeg": True,
        "rating": 4.2,
        "votes": 94,
    },
]

COUPONS: list[dict[str, object]] = [
    {
        "code": "WELCOME50",
        "description": "50% off on your first order",
        "discountPercent": 50,
        "maxDiscount": 100,
        "minOrder": 150,
    },
    {
        "code": "TIFFIN20",
        "description": "Flat 20 off on orders above 200",
        "discountAmount": 20,
        "minOrder": 200,
    },
]

CATEGORY_IMAGES: dict[str, str] = {
    "Recommended": "https://images.unsplash.com/photo-1626132647523-66f5bf380027?q=80&w=200&auto=format&fit=crop",
    "Breads": "https://images.unsplash.com/photo-1565557623262-b51c2513a641?q=80&w=200&auto=format&fit=crop",
    "Curries": "https://images.unsplash.com/photo-1546833999-b9f581a1996d?q=80&w=200&auto=format&fit=crop",
    "Other": "https://images.unsplash.com/photo-1504674900247-0877df9cc836?q=80&w=200&auto=format&fit=crop",
}

STATUS_BADGE_STYLES: dict[str, str] = {
    "PENDING": "bold #1f1300 on #f0b429",
    "CONFIRMED": "bold #ffffff on #2f6db5",
    "DELIVERED": "bold #0b1f0f on #5fbf72",
    "CANCELLED": "bold #ffffff on #b23a48",
}
