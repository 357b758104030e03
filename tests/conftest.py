"""Pytest configuration and shared fixtures for order-grid tests."""

from datetime import date, timedelta
from typing import Any, Dict
from unittest.mock import patch

import polars as pl
import pytest

from order_grid import OrderTable, order_columns
from order_grid.core.columns import STATUS_ORDER

PRICES = (799, 999, 1299, 1499, 1999)
PRODUCTS = ("Apple iPad Pro", "MacBook Air", "iPhone 15 Pro")
CATEGORIES = ("Tablets", "Laptops", "Smartphones")


class MockSessionState(dict):
    """Mock Streamlit session_state that behaves like a dict."""
    pass


@pytest.fixture
def mock_streamlit():
    """
    Mock Streamlit's session_state for testing the store.

    This fixture patches st.session_state to allow testing without
    running a full Streamlit server.
    """
    mock_session_state = MockSessionState()

    with patch('streamlit.session_state', mock_session_state):
        yield mock_session_state


@pytest.fixture
def session_state() -> Dict[str, Any]:
    """Plain dict used as an injected session mapping."""
    return {}


@pytest.fixture
def sample_orders() -> pl.DataFrame:
    """
    17 deterministic orders with ids order-1000 .. order-1016.

    Status cycles through the declared status order (4 pending),
    products cycle every 3 rows (6 iPads) and prices repeat so that
    sorting by price produces ties.
    """
    n = 17
    return pl.DataFrame(
        {
            "id": [f"order-{1000 + i}" for i in range(n)],
            "quantity": [(i % 5) + 1 for i in range(n)],
            "product": [PRODUCTS[i % 3] for i in range(n)],
            "company": ["Apple"] * n,
            "category": [CATEGORIES[i % 3] for i in range(n)],
            "image_url": ["https://example.com/img.png"] * n,
            "customer": [f"Customer-{1000 + i}" for i in range(n)],
            "status": [STATUS_ORDER[i % 5] for i in range(n)],
            "price": [float(PRICES[(i * 3) % 5]) for i in range(n)],
            "order_date": [
                date(2026, 10, 16) - timedelta(days=(i * 7) % 30) for i in range(n)
            ],
        },
        schema_overrides={"status": pl.Enum(STATUS_ORDER)},
    )


@pytest.fixture
def table(sample_orders, session_state) -> OrderTable:
    """Order table over the sample orders with an injected session mapping."""
    return OrderTable(
        sample_orders,
        columns=order_columns(),
        session_state=session_state,
    )
