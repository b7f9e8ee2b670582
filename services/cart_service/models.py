from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class KeyValueEntry(Base):
    """Client-state blobs (carts) persisted under a string key."""

    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
