"""Customer notification routes and the monthly reminder batch trigger."""

from fairlend_db import get_db
from fairlend_db.enums import UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.notification import (
    MonthlyBatchResponse,
    NotificationItem,
    NotificationListResponse,
)
from ..services import notification as notification_service

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    unread_only: bool = Query(default=False),
) -> NotificationListResponse:
    """List the current user's notifications, newest first."""
    notifications, unread = await notification_service.list_for_user(
        session, user.user_id, unread_only=unread_only
    )
    return NotificationListResponse(
        data=[NotificationItem.model_validate(n, from_attributes=True) for n in notifications],
        unread_count=unread,
    )


@router.post("/{notification_id}/read", response_model=NotificationItem)
async def mark_notification_read(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationItem:
    """Mark one of the current user's notifications as read. Idempotent."""
    notification = await notification_service.mark_read(
        session, notification_id, user_id=user.user_id
    )
    return NotificationItem.model_validate(notification, from_attributes=True)


@router.post(
    "/monthly-batch",
    response_model=MonthlyBatchResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.EMPLOYEE))],
)
async def run_monthly_batch(
    session: AsyncSession = Depends(get_db),
) -> MonthlyBatchResponse:
    """Send the monthly reminder to every applicant."""
    created = await notification_service.run_monthly_batch(session)
    return MonthlyBatchResponse(success=True, notifications_created=created)
