from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    brand: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1)
    stock: int = Field(ge=0)
    min_stock: int = Field(ge=0)
    description: Optional[str] = None
    item_code: Optional[str] = None
    warehouse_id: Optional[int] = None

    model_config = ConfigDict(str_strip_whitespace=True)
