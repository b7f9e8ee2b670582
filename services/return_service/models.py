from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ReturnRequest(Base):
    __tablename__ = "return_requests"

    id = Column(Integer, primary_key=True, index=True)
    return_number = Column(String(32), unique=True, nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    reason = Column(String(32), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="requested")
    refund_amount = Column(Float, nullable=False, default=0.0)
    return_shipping_cost = Column(Float, nullable=False, default=0.0)
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    items = relationship(
        "ReturnItem", back_populates="return_request", lazy="selectin", order_by="ReturnItem.id"
    )


class ReturnItem(Base):
    __tablename__ = "return_items"

    id = Column(Integer, primary_key=True, index=True)
    return_request_id = Column(Integer, ForeignKey("return_requests.id"), nullable=False, index=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    reason = Column(String(255), nullable=True)

    return_request = relationship("ReturnRequest", back_populates="items")
