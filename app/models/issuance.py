from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String

from app.database.base import Base


class Issuance(Base):
    __tablename__ = "issuances"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255))
    quantity = Column(Integer, nullable=False)

    customer_name = Column(String(255), nullable=False)
    branch = Column(String(100), nullable=False)
    engineer = Column(String(100), nullable=False)
    serial_number = Column(String(100))
    notes = Column(String)
    issued_by = Column(String(100))

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_issuances_quantity_positive"),
        Index("idx_issuances_product", "product_id"),
        Index("idx_issuances_created", "created_at"),
    )


__all__ = ["Issuance"]
