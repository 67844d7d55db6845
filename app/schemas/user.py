import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def check_email(value: str) -> str:
    if not EMAIL_RE.match(value or ""):
        raise ValueError("invalid email address")
    return value


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str
    role: Literal["admin", "inventory_manager", "engineer"]
    password: Optional[str] = Field(default=None, min_length=8)
    is_active: bool

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        return check_email(value)
