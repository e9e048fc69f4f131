"""Schemas for notification endpoints."""

from datetime import datetime

from . import CamelModel


class NotificationItem(CamelModel):
    id: int
    user_id: str
    message: str
    read: bool
    created_at: datetime | None = None


class NotificationListResponse(CamelModel):
    """Response for GET /api/notifications/."""

    data: list[NotificationItem]
    unread_count: int


class MonthlyBatchResponse(CamelModel):
    """Response for POST /api/notifications/monthly-batch."""

    success: bool
    notifications_created: int
