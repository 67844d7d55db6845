"""
Stock ledger

- stock_entries is append-only: one row per manual stock increase.
- new_stock = previous_stock + quantity_added on every row.
- products.stock is a cached aggregate. It is moved with a compare-and-swap
  on products.version, so previous_stock always equals the stock value the
  write replaced.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from app.config import get_settings
from app.core.dates import normalize_date, utc_now
from app.core.errors import ConcurrencyConflict, NotFound, StoreError
from app.core.validation import require_valid
from app.schemas.stock_entry import StockEntryCreate

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"
STOCK_ENTRIES_TABLE = "stock_entries"


def _load_product(gateway, product_id: int) -> dict:
    product = gateway.get(PRODUCTS_TABLE, product_id)
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    return product


def record_stock_entry(
    gateway,
    product_id: int,
    quantity_added: int,
    entered_by: str,
    notes: Optional[str] = None,
    *,
    user_id: Optional[str] = None,
    max_retries: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    payload = require_valid(
        StockEntryCreate,
        {
            "quantity_added": quantity_added,
            "entered_by": entered_by,
            "notes": notes,
            "user_id": user_id,
        },
    )
    attempts = max_retries if max_retries is not None else get_settings().STOCK_ENTRY_MAX_RETRIES
    if attempts < 1:
        raise ValueError(f"max_retries must be at least 1, got {attempts}")
    now = now or utc_now()

    for attempt in range(1, attempts + 1):
        product = _load_product(gateway, product_id)
        previous_stock = int(product.get("stock") or 0)
        new_stock = previous_stock + payload.quantity_added
        try:
            gateway.update(
                PRODUCTS_TABLE,
                product_id,
                {"stock": new_stock, "updated_at": now},
                expected_version=product["version"],
            )
        except ConcurrencyConflict:
            logger.warning(
                "Stock write conflict on product %s (attempt %s/%s)",
                product_id,
                attempt,
                attempts,
            )
            continue
        break
    else:
        raise ConcurrencyConflict(
            f"Product {product_id} stock changed concurrently; gave up after {attempts} attempts"
        )

    entry = {
        "product_id": product_id,
        "product_name": product.get("name"),
        "item_code": product.get("item_code"),
        "warehouse_id": product.get("warehouse_id"),
        "quantity_added": payload.quantity_added,
        "previous_stock": previous_stock,
        "new_stock": new_stock,
        "entered_by": payload.entered_by,
        "user_id": payload.user_id,
        "notes": payload.notes or None,
        "entry_date": now.date(),
        "entry_time": now.time().replace(microsecond=0, tzinfo=None),
        "entry_datetime": now,
    }
    try:
        created = gateway.insert(STOCK_ENTRIES_TABLE, entry)
    except StoreError:
        logger.error(
            "Product %s stock moved %s -> %s but the ledger entry was not written",
            product_id,
            previous_stock,
            new_stock,
        )
        raise

    logger.info(
        "Stock entry %s: product %s %s -> %s by %s",
        created.get("id"),
        product_id,
        previous_stock,
        new_stock,
        payload.entered_by,
    )
    return created


def get_history(gateway, product_id: int, *, limit: Optional[int] = None) -> list[dict]:
    return gateway.select(
        STOCK_ENTRIES_TABLE,
        {"product_id": product_id},
        order_by="entry_datetime",
        descending=True,
        limit=limit,
    )


def summarize_entries(entries: list[dict]) -> dict:
    total = sum(int(entry.get("quantity_added") or 0) for entry in entries)
    count = len(entries)
    unique_dates = {entry.get("entry_date") for entry in entries if entry.get("entry_date")}
    return {
        "totalQuantityAdded": total,
        "entriesCount": count,
        "uniqueDates": len(unique_dates),
        "averagePerEntry": math.floor(total / count + 0.5) if count else 0,
    }


def get_summary(gateway, product_id: int, start_date=None, end_date=None) -> dict:
    filters = {"product_id": product_id}
    start = normalize_date(start_date)
    end = normalize_date(end_date)
    date_range = []
    if start is not None:
        date_range.append(("gte", start))
    if end is not None:
        date_range.append(("lte", end))
    if date_range:
        filters["entry_date"] = date_range
    entries = gateway.select(STOCK_ENTRIES_TABLE, filters)
    return summarize_entries(entries)


__all__ = [
    "get_history",
    "get_summary",
    "record_stock_entry",
    "summarize_entries",
]
