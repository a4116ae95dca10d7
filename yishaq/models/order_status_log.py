from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yishaq.db import Base


class OrderStatusLog(Base):
    __tablename__ = "order_status_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)

    # "status" | "payment_status"
    field: Mapped[str] = mapped_column(String(24))
    old_value: Mapped[str] = mapped_column(String(24))
    new_value: Mapped[str] = mapped_column(String(24))
    user: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)  # acting admin id
    note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    order = relationship("Order")
