from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from app.core.errors import InventoryError, NotFound
from app.dependencies import get_gateway, require_auth
from app.http_errors import http_error
from app.schemas.stock_entry import StockEntryRead, StockSummary
from app.services.export_service import export_ledger_xlsx
from app.services.stock_ledger_service import (
    PRODUCTS_TABLE,
    get_history,
    get_summary,
    record_stock_entry,
)

router = APIRouter(prefix="/products/{product_id}/stock-entries", tags=["Stock Entries"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _require_product(gateway, product_id: int) -> dict:
    product = gateway.get(PRODUCTS_TABLE, product_id)
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    return product


@router.post("", response_model=StockEntryRead, status_code=status.HTTP_201_CREATED)
def add_stock_entry(
    product_id: int,
    payload: Any = Body(default=None),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    body = payload if isinstance(payload, dict) else {}
    try:
        return record_stock_entry(
            gateway,
            product_id,
            body.get("quantity_added"),
            body.get("entered_by"),
            body.get("notes"),
            user_id=body.get("user_id"),
        )
    except InventoryError as exc:
        raise http_error(exc, "Failed to add stock entry") from exc


@router.get("")
def list_stock_entries(
    product_id: int,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    try:
        _require_product(gateway, product_id)
        return {"entries": get_history(gateway, product_id, limit=limit)}
    except InventoryError as exc:
        raise http_error(exc, "Failed to load stock entries") from exc


@router.get("/summary", response_model=StockSummary)
def stock_entry_summary(
    product_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    try:
        _require_product(gateway, product_id)
        return get_summary(gateway, product_id, start_date, end_date)
    except InventoryError as exc:
        raise http_error(exc, "Failed to summarize stock entries") from exc


@router.get("/export")
def export_stock_entries(
    product_id: int,
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    try:
        product = _require_product(gateway, product_id)
        entries = list(reversed(get_history(gateway, product_id)))
    except InventoryError as exc:
        raise http_error(exc, "Failed to export stock entries") from exc

    filename = "stock-entries-{}-{}.xlsx".format(product.get("item_code") or product_id, date.today().isoformat())
    return Response(
        content=export_ledger_xlsx(product, entries),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["router"]
