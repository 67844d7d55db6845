from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.user import check_email


class SettingsUpdate(BaseModel):
    system_name: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    company_email: str
    company_phone: str = Field(min_length=1)
    company_address: str = Field(min_length=1)
    low_stock_threshold: int = Field(ge=1)
    # minutes
    session_timeout: int = Field(ge=5, le=480)
    # days
    password_expiry: int = Field(ge=30, le=365)
    max_login_attempts: int = Field(ge=3, le=10)
    backup_retention: int = Field(ge=7, le=365)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("company_email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        return check_email(value)
