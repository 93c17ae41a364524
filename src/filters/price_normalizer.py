# src/filters/price_normalizer.py

"""Raw store price rows → canonical :class:`PriceRecord` objects.

Store rows arrive with currency strings (``"₹8,999.00"``), loosely
spelled availability labels and JSON-encoded blob columns.  Everything
is decoded here, once, so the comparison and search code only ever sees
typed values.
"""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from src.models.price_record import Availability, PriceRecord

logger = logging.getLogger("pricecompare.normalizer")

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

_AVAILABILITY_ALIASES: dict[str, Availability] = {
    "in_stock": Availability.IN_STOCK,
    "instock": Availability.IN_STOCK,
    "available": Availability.IN_STOCK,
    "limited_stock": Availability.LIMITED_STOCK,
    "limited": Availability.LIMITED_STOCK,
    "low_stock": Availability.LIMITED_STOCK,
    "few_left": Availability.LIMITED_STOCK,
    "out_of_stock": Availability.OUT_OF_STOCK,
    "outofstock": Availability.OUT_OF_STOCK,
    "sold_out": Availability.OUT_OF_STOCK,
    "unavailable": Availability.OUT_OF_STOCK,
}


def parse_price(raw: object) -> float | None:
    """Parse a price from a number or a currency-formatted string.

    Thousands separators and currency symbols are ignored.  Returns
    ``None`` for blanks and strings without any digits.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).replace(",", "").strip()
    if not text:
        return None
    match = _NUMBER_RE.search(text)
    if match is None:
        return None
    return float(match.group(0))


def parse_availability(raw: object) -> Availability:
    """Map a store's stock label onto :class:`Availability`.

    Missing labels default to ``in_stock``; unknown labels raise
    ``ValueError``.
    """
    if raw is None or raw == "":
        return Availability.IN_STOCK
    if isinstance(raw, Availability):
        return raw
    key = re.sub(r"[\s\-]+", "_", str(raw).strip().lower())
    try:
        return _AVAILABILITY_ALIASES[key]
    except KeyError:
        msg = f"unknown availability label: {raw!r}"
        raise ValueError(msg) from None


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted).

    Offset-aware values are converted to UTC and returned naive.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def decode_json_blob(raw: object, column: str) -> object | None:
    """Decode a JSON blob column; malformed blobs decode to ``None``."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(
            "Ignoring malformed JSON in column %s: %s", column, exc,
        )
        return None


def compute_discount(
    price: float, original_price: float | None,
) -> float | None:
    """Percentage saved against the original price, 2 decimals."""
    if original_price is None or original_price <= 0:
        return None
    if original_price <= price:
        return None
    return round((original_price - price) / original_price * 100, 2)


class PriceRecordNormalizer:
    """Convert raw price rows into validated :class:`PriceRecord` objects."""

    @staticmethod
    def normalize_row(row: Mapping[str, object]) -> PriceRecord:
        """Build one record from a raw row.

        Accepts either ``store_name``/``product_url`` or the shorter
        ``store``/``url`` keys used by catalogue files.  Raises
        ``ValueError`` when the row cannot form a valid record.
        """
        price = parse_price(row.get("price"))
        if price is None:
            msg = f"row has no parseable price: {row.get('price')!r}"
            raise ValueError(msg)

        original_price = parse_price(row.get("original_price"))
        if original_price is not None and original_price < price:
            logger.debug(
                "Discarding original_price %.2f below price %.2f "
                "(product=%s, store=%s)",
                original_price,
                price,
                row.get("product_id"),
                row.get("store_name", row.get("store")),
            )
            original_price = None

        discount = parse_price(row.get("discount_percentage"))
        if discount is None:
            discount = compute_discount(price, original_price)

        size_availability = decode_json_blob(
            row.get("size_availability"), "size_availability",
        )
        rating = parse_price(row.get("rating"))
        review_count = row.get("review_count") or 0

        return PriceRecord(
            product_id=int(str(row.get("product_id", 0))),
            store_id=int(str(row.get("store_id", 0))),
            store_name=str(
                row.get("store_name", row.get("store", ""))
            ),
            price=price,
            availability=parse_availability(row.get("availability")),
            original_price=original_price,
            discount_percentage=discount,
            product_url=str(
                row.get("product_url", row.get("url", "")) or ""
            ),
            last_scraped=parse_timestamp(row.get("last_scraped")),
            rating=rating,
            review_count=int(str(review_count)),
            size_availability=(
                size_availability
                if isinstance(size_availability, dict)
                else None
            ),
        )

    @staticmethod
    def normalize_rows(
        rows: Iterable[Mapping[str, object]],
    ) -> tuple[list[PriceRecord], int]:
        """Normalise many rows, dropping the ones that cannot be parsed.

        Returns the valid records and the count of dropped rows.
        """
        records: list[PriceRecord] = []
        dropped = 0

        for row in rows:
            try:
                records.append(PriceRecordNormalizer.normalize_row(row))
            except (ValueError, TypeError) as exc:
                logger.debug(
                    "Dropped price row (product=%s, store=%s): %s",
                    row.get("product_id"),
                    row.get("store_name", row.get("store")),
                    exc,
                )
                dropped += 1

        if dropped:
            logger.info(
                "Normalisation dropped %d invalid price rows", dropped,
            )

        return records, dropped
