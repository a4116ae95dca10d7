from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from yishaq.db import Base


class StockAudit(Base):
    __tablename__ = "stock_audit"

    id = Column(Integer, primary_key=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # DECREASE | SET
    change_type = Column(String(16), nullable=False)

    delta_units = Column(Integer, nullable=False)  # units removed, or the new value for SET
    old_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    note = Column(String(500), nullable=True)  # e.g. the order number

    user = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product")
