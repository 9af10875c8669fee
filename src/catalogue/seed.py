"""Demo catalogue used by the management CLI and local development."""

from decimal import Decimal

import structlog

from catalogue.compiler import PRODUCTS
from catalogue.products import PRODUCT_IMAGES
from storefront.store import BackingStore, Query

logger = structlog.get_logger(__name__)

DEMO_PRODUCTS = [
    {
        "product_id": "iphone-15-pro",
        "name": "iPhone 15 Pro",
        "slug": "iphone-15-pro",
        "description": "Titanium design with the A17 Pro chip.",
        "price": Decimal("999.00"),
        "category": "Smartphones",
        "color": "Natural Titanium",
        "storage": 256,
        "stock_quantity": 25,
        "specs": {"display": "6.1-inch", "chip": "A17 Pro"},
    },
    {
        "product_id": "iphone-15",
        "name": "iPhone 15",
        "slug": "iphone-15",
        "description": "Dynamic Island and a 48MP main camera.",
        "price": Decimal("799.00"),
        "category": "Smartphones",
        "color": "Pink",
        "storage": 128,
        "stock_quantity": 40,
        "specs": {"display": "6.1-inch", "chip": "A16 Bionic"},
    },
    {
        "product_id": "macbook-air-13",
        "name": "MacBook Air 13",
        "slug": "macbook-air-13",
        "description": "Thin, light and silent.",
        "price": Decimal("1099.00"),
        "category": "Laptops",
        "color": "Midnight",
        "storage": 512,
        "stock_quantity": 15,
        "specs": {"display": "13.6-inch", "chip": "M3"},
    },
    {
        "product_id": "macbook-pro-14",
        "name": "MacBook Pro 14",
        "slug": "macbook-pro-14",
        "description": "Pro performance in a portable design.",
        "price": Decimal("1999.00"),
        "category": "Laptops",
        "color": "Space Black",
        "storage": 1000,
        "stock_quantity": 10,
        "specs": {"display": "14.2-inch", "chip": "M3 Pro"},
    },
    {
        "product_id": "macbook-pro-16",
        "name": "MacBook Pro 16",
        "slug": "macbook-pro-16",
        "description": "The biggest display for the biggest projects.",
        "price": Decimal("2499.00"),
        "category": "Laptops",
        "color": "Silver",
        "storage": 1000,
        "stock_quantity": 6,
        "specs": {"display": "16.2-inch", "chip": "M3 Max"},
    },
    {
        "product_id": "ipad-air",
        "name": "iPad Air",
        "slug": "ipad-air",
        "description": "Serious performance in a thin design.",
        "price": Decimal("599.00"),
        "category": "Tablets",
        "color": "Silver",
        "storage": 128,
        "stock_quantity": 30,
        "specs": {"display": "10.9-inch", "chip": "M1"},
    },
    {
        "product_id": "airpods-pro",
        "name": "AirPods Pro",
        "slug": "airpods-pro",
        "description": "Active noise cancellation.",
        "price": Decimal("249.00"),
        "category": "Audio",
        "color": "White",
        "storage": None,
        "stock_quantity": 80,
        "specs": {"battery": "6 hours"},
    },
    {
        "product_id": "apple-watch-ultra",
        "name": "Apple Watch Ultra",
        "slug": "apple-watch-ultra",
        "description": "Rugged and capable.",
        "price": Decimal("799.00"),
        "category": "Wearables",
        "color": "Titanium",
        "storage": 64,
        "stock_quantity": 12,
        "specs": {"case": "49mm"},
    },
    {
        "product_id": "imac-24",
        "name": "iMac 24",
        "slug": "imac-24",
        "description": "All-in-one with a 4.5K display.",
        "price": Decimal("1299.00"),
        "category": "Desktops",
        "color": "Silver",
        "storage": 256,
        "stock_quantity": 8,
        "specs": {"display": "24-inch", "chip": "M3"},
    },
]


def _images_for(product: dict) -> list[dict]:
    slug = product["slug"]
    return [
        {
            "id": f"{slug}-front",
            "product_id": product["product_id"],
            "image_url": f"https://images.example.com/{slug}/front.jpg",
            "is_primary": True,
            "sort_order": 0,
        },
        {
            "id": f"{slug}-back",
            "product_id": product["product_id"],
            "image_url": f"https://images.example.com/{slug}/back.jpg",
            "is_primary": False,
            "sort_order": 1,
        },
    ]


async def seed_catalogue(store: BackingStore) -> int:
    """Insert the demo products that are not already present. Returns how many were added."""
    added = 0
    for product in DEMO_PRODUCTS:
        if await store.find_one(PRODUCTS, Query().filter(product_id=product["product_id"])) is not None:
            continue
        await store.insert(PRODUCTS, product)
        for image in _images_for(product):
            await store.insert(PRODUCT_IMAGES, image)
        added += 1

    logger.info("Catalogue seeded", added=added, total=len(DEMO_PRODUCTS))
    return added
