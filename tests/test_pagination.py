"""Tests for the pagination stage."""

import polars as pl
import pytest

from order_grid.preprocessing.pagination import clamp_page_index, page_count, paginate


@pytest.fixture
def ordered() -> pl.DataFrame:
    return pl.DataFrame({"id": [f"order-{1000 + i}" for i in range(17)]})


class TestPageCount:
    """Tests for page count arithmetic."""

    @pytest.mark.parametrize(
        "total,size,expected",
        [(17, 10, 2), (20, 10, 2), (21, 10, 3), (1, 10, 1), (0, 10, 1), (17, 5, 4)],
    )
    def test_page_count(self, total, size, expected):
        assert page_count(total, size) == expected

    def test_non_positive_page_size(self):
        with pytest.raises(ValueError, match="page_size must be positive"):
            page_count(10, 0)

    def test_clamp(self):
        assert clamp_page_index(5, 2) == 1
        assert clamp_page_index(-3, 2) == 0
        assert clamp_page_index(1, 2) == 1


class TestPaginate:
    """Tests for page windows."""

    def test_first_page(self, ordered):
        window = paginate(ordered, 0, 10)
        assert window.rows["id"].to_list() == [f"order-{1000 + i}" for i in range(10)]
        assert window.page_count == 2
        assert window.total_rows == 17
        assert not window.can_prev
        assert window.can_next

    def test_last_page_partial(self, ordered):
        window = paginate(ordered, 1, 10)
        assert window.rows.height == 7
        assert window.can_prev
        assert not window.can_next

    def test_out_of_range_clamps(self, ordered):
        window = paginate(ordered, 5, 10)
        assert window.page_index == 1
        assert window.rows["id"].to_list()[0] == "order-1010"

    def test_negative_index_clamps(self, ordered):
        assert paginate(ordered, -1, 10).page_index == 0

    def test_empty_is_one_page(self):
        window = paginate(pl.DataFrame({"id": []}, schema={"id": pl.Utf8}), 3, 10)
        assert window.page_index == 0
        assert window.page_count == 1
        assert window.rows.height == 0
        assert not window.can_prev
        assert not window.can_next

    @pytest.mark.parametrize("size", [1, 3, 5, 10, 17, 50])
    def test_pages_cover_sequence(self, ordered, size):
        """All pages concatenated reproduce the input, no gaps or duplicates."""
        total_pages = page_count(ordered.height, size)
        ids = []
        for index in range(total_pages):
            ids.extend(paginate(ordered, index, size).rows["id"].to_list())
        assert ids == ordered["id"].to_list()
