# src/services/multi_comparison.py

"""Side-by-side aggregation of several product comparisons."""

import logging
from collections.abc import Sequence

from src.config.settings import Settings
from src.models.comparison import (
    BestDeal,
    MultiProductComparison,
    ProductComparison,
    StoreMatrixCell,
    StoreMatrixRow,
)
from src.models.errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger("pricecompare.multi_compare")

NOT_AVAILABLE = "not_available"


def validate_product_ids(raw_ids: Sequence[object]) -> list[int]:
    """Coerce, de-duplicate and bound a list of product ids.

    Order of first appearance is kept.

    Raises:
        InvalidArgumentError: on non-integer or non-positive ids, an
            empty list, or more than ``MAX_COMPARE_PRODUCTS`` ids.
    """
    ids: list[int] = []
    for raw in raw_ids:
        if isinstance(raw, bool):
            msg = f"invalid product id: {raw!r}"
            raise InvalidArgumentError(msg)
        try:
            value = int(str(raw).strip())
        except ValueError as exc:
            msg = f"invalid product id: {raw!r}"
            raise InvalidArgumentError(msg) from exc
        if value <= 0:
            msg = f"product id must be positive: {value}"
            raise InvalidArgumentError(msg)
        if value not in ids:
            ids.append(value)

    if not ids:
        msg = "at least one product id is required"
        raise InvalidArgumentError(msg)
    if len(ids) > Settings.MAX_COMPARE_PRODUCTS:
        msg = (
            f"at most {Settings.MAX_COMPARE_PRODUCTS} products can be "
            f"compared, got {len(ids)}"
        )
        raise InvalidArgumentError(msg)
    return ids


def build_store_matrix(
    comparisons: Sequence[ProductComparison],
) -> list[StoreMatrixRow]:
    """One row per distinct store, one cell per compared product.

    Stores appear in the order they are first seen while walking the
    comparisons, so the cheapest store of the first product leads.
    """
    store_names: list[str] = []
    for comp in comparisons:
        for entry in comp.comparison:
            if entry.store_name not in store_names:
                store_names.append(entry.store_name)

    rows: list[StoreMatrixRow] = []
    for store_name in store_names:
        cells: list[StoreMatrixCell] = []
        for comp in comparisons:
            entry = next(
                (
                    e for e in comp.comparison
                    if e.store_name == store_name
                ),
                None,
            )
            if entry is None:
                cells.append(
                    StoreMatrixCell(
                        product_id=comp.product.id,
                        price=None,
                        availability=NOT_AVAILABLE,
                        url=None,
                        is_lowest=False,
                    )
                )
                continue
            cells.append(
                StoreMatrixCell(
                    product_id=comp.product.id,
                    price=entry.price,
                    availability=entry.record.availability.value,
                    url=entry.record.product_url,
                    is_lowest=entry.is_lowest_price,
                )
            )
        rows.append(StoreMatrixRow(store_name=store_name, products=cells))
    return rows


def find_overall_best_deal(
    comparisons: Sequence[ProductComparison],
) -> BestDeal | None:
    """Cheapest lowest-price entry across all products; first wins ties."""
    best: BestDeal | None = None
    for comp in comparisons:
        entry = comp.best_entry
        if entry is None:
            continue
        if best is None or entry.price < best.price:
            best = BestDeal(
                product_id=comp.product.id,
                product_name=comp.product.name,
                store_name=entry.store_name,
                price=entry.price,
                url=entry.record.product_url,
            )
    return best


def build_multi_comparison(
    comparisons: Sequence[ProductComparison],
    requested_ids: Sequence[int],
    failed_ids: Sequence[int] = (),
) -> MultiProductComparison:
    """Assemble the multi-product view from the surviving comparisons.

    Raises:
        NotFoundError: when no comparison survived.
    """
    if not comparisons:
        msg = (
            "None of the requested products could be compared: "
            f"{list(requested_ids)}"
        )
        raise NotFoundError(msg)

    if failed_ids:
        logger.info(
            "Partial multi-product comparison: %d of %d products "
            "dropped %s",
            len(failed_ids),
            len(requested_ids),
            list(failed_ids),
        )

    return MultiProductComparison(
        comparisons=list(comparisons),
        store_comparison=build_store_matrix(comparisons),
        overall_best_deal=find_overall_best_deal(comparisons),
        requested_ids=list(requested_ids),
        failed_ids=list(failed_ids),
    )
