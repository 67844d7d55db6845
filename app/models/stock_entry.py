from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Time

from app.database.base import Base


class StockEntry(Base):
    """One manual stock increase. Rows are append-only."""

    __tablename__ = "stock_entries"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255))
    item_code = Column(String(32))
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"))

    quantity_added = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)

    entered_by = Column(String(100), nullable=False)
    user_id = Column(String(64))
    notes = Column(String)

    entry_date = Column(Date, nullable=False)
    entry_time = Column(Time, nullable=False)
    entry_datetime = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("quantity_added > 0", name="ck_stock_entries_quantity_positive"),
        CheckConstraint("new_stock = previous_stock + quantity_added", name="ck_stock_entries_balance"),
        Index("idx_stock_entries_product", "product_id", "entry_datetime"),
        Index("idx_stock_entries_date", "entry_date"),
    )


__all__ = ["StockEntry"]
