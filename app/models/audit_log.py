from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String

from app.database.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64))
    user_name = Column(String(100))
    action = Column(String(120), nullable=False)
    module = Column(String(120))
    details = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_activity_logs_created", "created_at"),)


class SecurityLog(Base):
    __tablename__ = "security_logs"

    id = Column(Integer, primary_key=True)
    event_type = Column(String(64), nullable=False)
    severity = Column(String(16), nullable=False, default="medium")
    details = Column(String)
    ip_address = Column(String(64))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_security_logs_created", "created_at"),)


__all__ = ["ActivityLog", "SecurityLog"]
