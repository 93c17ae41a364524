# tests/test_models.py

"""Tests for the product, price and search value objects."""

import unittest
from datetime import date, datetime

from src.models.errors import InvalidArgumentError
from src.models.price_record import (
    Availability,
    PriceHistorySample,
    PriceRecord,
)
from src.models.product import Product, ProductSummary
from src.models.search import (
    BrandStats,
    CategoryCount,
    FilterOptions,
    PageRequest,
    Pagination,
    SearchFilterSet,
    SortMode,
    paginate,
)


class TestPriceRecord(unittest.TestCase):
    """Construction-time validation of PriceRecord."""

    def test_negative_price_rejected(self) -> None:
        """Prices below zero are refused."""
        with self.assertRaises(ValueError):
            PriceRecord(1, 1, "Amazon", -1.0)

    def test_original_below_price_rejected(self) -> None:
        """An original price under the selling price is refused."""
        with self.assertRaises(ValueError):
            PriceRecord(1, 1, "Amazon", 100.0, original_price=90.0)

    def test_zero_price_allowed(self) -> None:
        """Free items are valid records."""
        record = PriceRecord(1, 1, "Amazon", 0.0)
        self.assertEqual(record.price, 0.0)

    def test_to_dict_serialises_enum_and_timestamp(self) -> None:
        """Enums become values and timestamps ISO strings."""
        record = PriceRecord(
            1,
            2,
            "Flipkart",
            9499.0,
            availability=Availability.LIMITED_STOCK,
            last_scraped=datetime(2026, 10, 18, 7, 30),
        )
        data = record.to_dict()
        self.assertEqual(data["availability"], "limited_stock")
        self.assertEqual(data["last_scraped"], "2026-10-18T07:30:00")
        self.assertEqual(data["store_name"], "Flipkart")

    def test_eligibility(self) -> None:
        """Only in-stock and limited-stock offers are purchasable."""
        self.assertTrue(Availability.IN_STOCK.is_eligible)
        self.assertTrue(Availability.LIMITED_STOCK.is_eligible)
        self.assertFalse(Availability.OUT_OF_STOCK.is_eligible)


class TestProduct(unittest.TestCase):
    """Product identity and summaries."""

    def test_empty_name_rejected(self) -> None:
        """A blank product name is refused."""
        with self.assertRaises(ValueError):
            Product(id=1, name="  ", brand="Nike")

    def test_to_ref_fields(self) -> None:
        """Product references carry only identifying fields."""
        product = Product(id=3, name="Air Max 270", brand="Nike")
        self.assertEqual(
            set(product.to_ref()),
            {"id", "name", "brand", "model", "primary_image_url"},
        )

    def test_price_range_formatting(self) -> None:
        """The price range reads low to high."""
        summary = ProductSummary(
            id=1, name="Air Max", brand="Nike",
            min_price=7999.0, max_price=10999.0,
        )
        self.assertEqual(summary.price_range, "₹7999 - ₹10999")

    def test_price_range_missing(self) -> None:
        """Unpriced summaries have no range."""
        summary = ProductSummary(id=1, name="Air Max", brand="Nike")
        self.assertIsNone(summary.price_range)
        self.assertIsNone(summary.to_dict()["price_range"])

    def test_history_sample_dict_uses_date_key(self) -> None:
        """History samples serialise their day under "date"."""
        sample = PriceHistorySample(
            product_id=1,
            store_id=1,
            store_name="Amazon",
            recorded_at=date(2026, 10, 1),
            avg_price=100.0,
            min_price=90.0,
            max_price=110.0,
        )
        self.assertEqual(sample.to_dict()["date"], "2026-10-01")


class TestSearchFilterSet(unittest.TestCase):
    """Validation of raw search parameters."""

    def test_defaults(self) -> None:
        """No parameters give an empty relevance search."""
        filters = SearchFilterSet.from_params()
        self.assertEqual(filters.query, "")
        self.assertFalse(filters.has_query)
        self.assertIs(filters.sort_by, SortMode.RELEVANCE)

    def test_query_trimmed_and_normalised(self) -> None:
        """The query is trimmed and lowercased for matching."""
        filters = SearchFilterSet.from_params(query="  Nike Air ")
        self.assertEqual(filters.query, "Nike Air")
        self.assertEqual(filters.normalized_query, "nike air")

    def test_short_query_rejected(self) -> None:
        """One-character queries are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(query="n")

    def test_long_query_rejected(self) -> None:
        """Queries over 100 characters are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(query="x" * 101)

    def test_long_brand_rejected(self) -> None:
        """Brands over 50 characters are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(brand="b" * 51)

    def test_price_strings_parsed(self) -> None:
        """Price bounds given as strings become floats."""
        filters = SearchFilterSet.from_params(
            min_price="1000", max_price="5000.5",
        )
        self.assertEqual(filters.min_price, 1000.0)
        self.assertEqual(filters.max_price, 5000.5)

    def test_non_numeric_price_rejected(self) -> None:
        """Non-numeric price bounds are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(min_price="cheap")

    def test_out_of_range_price_rejected(self) -> None:
        """Bounds outside 0..100000 are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(max_price="100001")
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(min_price="-1")

    def test_inverted_bounds_rejected(self) -> None:
        """A minimum above the maximum is refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(min_price=500, max_price=100)

    def test_unknown_sort_rejected(self) -> None:
        """Unknown sort names are refused."""
        with self.assertRaises(InvalidArgumentError):
            SearchFilterSet.from_params(sort_by="popularity")

    def test_sort_parsed(self) -> None:
        """Sort names parse into SortMode members."""
        filters = SearchFilterSet.from_params(sort_by="price_desc")
        self.assertIs(filters.sort_by, SortMode.PRICE_DESC)
        self.assertEqual(filters.to_dict()["sort_by"], "price_desc")


class TestPagination(unittest.TestCase):
    """Page request validation and page bookkeeping."""

    def test_page_request_defaults(self) -> None:
        """Paging defaults to the first page of 20."""
        request = PageRequest.from_params()
        self.assertEqual((request.page, request.limit), (1, 20))

    def test_page_request_bounds(self) -> None:
        """Out-of-range or junk paging values are refused."""
        for page, limit in (("0", "20"), ("101", "20"), ("1", "0"),
                            ("1", "51"), ("x", "20")):
            with self.subTest(page=page, limit=limit):
                with self.assertRaises(InvalidArgumentError):
                    PageRequest.from_params(page, limit)

    def test_pagination_flags_hold_for_all_pages(self) -> None:
        """has_next / has_prev follow page position for every page."""
        for total in (0, 1, 19, 20, 21, 95):
            for limit in (1, 7, 20, 50):
                for page in range(1, 8):
                    info = Pagination.build(page, limit, total)
                    self.assertEqual(
                        info.has_next, page < info.total_pages,
                    )
                    self.assertEqual(info.has_prev, page > 1)

    def test_total_pages_ceiling(self) -> None:
        """Total pages round up."""
        self.assertEqual(Pagination.build(1, 20, 41).total_pages, 3)
        self.assertEqual(Pagination.build(1, 20, 0).total_pages, 0)

    def test_paginate_slices(self) -> None:
        """Pagination returns the requested slice."""
        items = [
            ProductSummary(id=i, name=f"P{i}", brand="B")
            for i in range(1, 6)
        ]
        page, info = paginate(items, page=2, limit=2)
        self.assertEqual([p.id for p in page], [3, 4])
        self.assertTrue(info.has_next)
        self.assertTrue(info.has_prev)

    def test_page_beyond_end_is_empty(self) -> None:
        """A page past the end is empty."""
        items = [ProductSummary(id=1, name="P1", brand="B")]
        page, info = paginate(items, page=3, limit=20)
        self.assertEqual(page, [])
        self.assertFalse(info.has_next)


class TestFilterOptions(unittest.TestCase):
    """Grouping of category counts for the filters view."""

    def test_categories_grouped_with_totals(self) -> None:
        """Categories group their subcategories with a total."""
        options = FilterOptions(
            categories=[
                CategoryCount("shoes", "running", 3),
                CategoryCount("shoes", "lifestyle", 2),
                CategoryCount("bags", None, 1),
            ],
            brands=[BrandStats("Nike", 4, 7999.0, 12999.0)],
        )
        data = options.to_dict()
        categories = data["categories"]
        assert isinstance(categories, list)
        shoes = categories[0]
        self.assertEqual(shoes["name"], "shoes")
        self.assertEqual(shoes["product_count"], 5)
        self.assertEqual(len(shoes["subcategories"]), 2)
        self.assertEqual(categories[1]["subcategories"], [])


if __name__ == "__main__":
    unittest.main()
