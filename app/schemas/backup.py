from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class BackupRequest(BaseModel):
    type: Literal["full", "manual"] = "full"
    tables: Optional[List[str]] = None


class BackupConfigUpdate(BaseModel):
    auto_backup_enabled: Optional[bool] = None
    backup_frequency: Optional[Literal["hourly", "daily", "weekly"]] = None
    backup_retention_days: Optional[int] = Field(default=None, ge=7, le=365)
    backup_retention_count: Optional[int] = Field(default=None, ge=1)
