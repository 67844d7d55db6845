from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IssuanceCreate(BaseModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(ge=1)
    customer_name: str = Field(min_length=1, max_length=255)
    branch: str = Field(min_length=1)
    engineer: str = Field(min_length=1, max_length=100)
    serial_number: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)
