from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(String(32), nullable=False, default="pending")
    payment_status = Column(String(32), nullable=False, default="pending")
    payment_method = Column(String(32), nullable=False)
    payment_intent_id = Column(String(128), nullable=True)

    # Money breakdown, frozen at checkout time
    subtotal = Column(Float, nullable=False)
    tax_amount = Column(Float, nullable=False, default=0.0)
    shipping_amount = Column(Float, nullable=False, default=0.0)
    cod_charge = Column(Float, nullable=False, default=0.0)
    discount_amount = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="INR")
    coupon_code = Column(String(64), nullable=True)

    # Address snapshots, never references to the address book
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=False)
    customer_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    items = relationship(
        "OrderItem", back_populates="order", lazy="selectin", order_by="OrderItem.id"
    )
    tracking = relationship(
        "OrderTracking", back_populates="order", lazy="selectin", order_by="OrderTracking.id"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)
    product_name = Column(String(255), nullable=False)
    product_image = Column(String(512), nullable=True)
    flavor = Column(String(64), nullable=False)
    size = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order = relationship("Order", back_populates="items")


class OrderTracking(Base):
    """Append-only status log. Rows are never updated or deleted."""

    __tablename__ = "order_tracking"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(String(64), nullable=False)
    message = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order = relationship("Order", back_populates="tracking")
