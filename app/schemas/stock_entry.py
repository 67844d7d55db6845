from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StockEntryCreate(BaseModel):
    quantity_added: int = Field(gt=0)
    entered_by: str = Field(min_length=1, max_length=100)
    notes: Optional[str] = None
    user_id: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class StockEntryRead(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    item_code: Optional[str] = None
    warehouse_id: Optional[int] = None
    quantity_added: int
    previous_stock: int
    new_stock: int
    entered_by: str
    user_id: Optional[str] = None
    notes: Optional[str] = None
    entry_date: date
    entry_time: time
    entry_datetime: datetime


class StockSummary(BaseModel):
    totalQuantityAdded: int
    entriesCount: int
    uniqueDates: int
    averagePerEntry: int
