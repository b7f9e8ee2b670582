from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Payment(Base):
    """One row per gateway call: charges and refunds alike."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, nullable=False, index=True)
    kind = Column(String(16), nullable=False, default="charge") # charge, refund
    method = Column(String(32), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="INR")
    status = Column(String(16), nullable=False) # success, failed
    transaction_id = Column(String(128), nullable=True, index=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
