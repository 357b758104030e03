"""Sample order records for demos and tests."""

from datetime import date, timedelta
from typing import Optional

import numpy as np
import polars as pl

from .core.columns import STATUS_ORDER

PRODUCTS = ("Apple iPad Pro", "MacBook Air", "iPhone 15 Pro")
CATEGORIES = ("Tablets", "Laptops", "Smartphones")
PRICES = (799, 999, 1299, 1499, 1999)
IMAGE_URL = "https://example.com/images/apple-product.png"


def generate_orders(
    count: int = 17,
    seed: Optional[int] = None,
    today: Optional[date] = None,
) -> pl.DataFrame:
    """
    Generate a frame of random orders.

    Product and category cycle with the row index; status, price,
    quantity and order date are random. Identifiers run from
    ``order-1000`` upward.

    Args:
        count: Number of orders
        seed: Seed for reproducible output
        today: Latest possible order date (defaults to today)

    Returns:
        DataFrame with one row per order, status as ``pl.Enum``
    """
    rng = np.random.default_rng(seed)
    today = today or date.today()

    return pl.DataFrame(
        {
            "id": [f"order-{1000 + i}" for i in range(count)],
            "quantity": rng.integers(1, 6, size=count).tolist(),
            "product": [PRODUCTS[i % 3] for i in range(count)],
            "company": ["Apple"] * count,
            "category": [CATEGORIES[i % 3] for i in range(count)],
            "image_url": [IMAGE_URL] * count,
            "customer": [f"Customer-{1000 + i}" for i in range(count)],
            "status": rng.choice(STATUS_ORDER, size=count).tolist(),
            "price": [
                float(PRICES[i]) for i in rng.integers(0, len(PRICES), size=count)
            ],
            "order_date": [
                today - timedelta(days=int(days))
                for days in rng.integers(0, 30, size=count)
            ],
        },
        schema_overrides={"status": pl.Enum(STATUS_ORDER)},
    )
