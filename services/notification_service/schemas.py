from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    user_id: Optional[int]
    type: str
    title: str
    message: str
    data: Optional[dict[str, Any]]
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class AdminNotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    data: Optional[dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True


class EmailTemplate(BaseModel):
    subject: str
    text: str


class DeliveryResult(BaseModel):
    success: bool
    error: Optional[str] = None
