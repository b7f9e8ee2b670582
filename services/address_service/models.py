from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class SavedAddress(Base):
    """Address book entry. Orders copy these, they never point at them."""

    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(16), nullable=False, default="shipping")
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    address_line_1 = Column(String(255), nullable=False)
    address_line_2 = Column(String(255), nullable=True)
    city = Column(String(128), nullable=False)
    state = Column(String(128), nullable=False)
    postal_code = Column(String(16), nullable=False)
    country = Column(String(64), nullable=False, default="India")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
