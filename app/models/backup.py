from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String

from app.database.base import Base


class BackupHistory(Base):
    __tablename__ = "backup_history"

    id = Column(Integer, primary_key=True)
    backup_id = Column(String(64), nullable=False, unique=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(16), nullable=False)
    record_counts = Column(JSON, nullable=False, default=dict)
    size = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="completed")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("idx_backup_history_timestamp", "timestamp"),)


class BackupConfig(Base):
    """Single-row table (id=1) overriding the settings defaults."""

    __tablename__ = "backup_config"

    id = Column(Integer, primary_key=True)
    auto_backup_enabled = Column(Boolean, nullable=False, default=True)
    backup_frequency = Column(String(16), nullable=False, default="daily")
    backup_retention_days = Column(Integer, nullable=False, default=30)
    backup_retention_count = Column(Integer, nullable=False, default=30)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(DateTime(timezone=True))


__all__ = ["BackupConfig", "BackupHistory"]
