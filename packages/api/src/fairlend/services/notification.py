"""Notification dispatcher.

Notifications are created unread and may only move unread -> read. Writes go
through the persistence gateway; PersistenceError propagates to the caller.
"""

import logging

from fairlend_db import Notification
from fairlend_db.gateway import (
    get_notification,
    insert_notification,
    insert_notifications,
    list_applicant_ids,
    list_notifications,
    mark_notification_read,
)
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def notify(session: AsyncSession, user_id: str, message: str) -> Notification:
    """Create an unread notification for a principal."""
    if not user_id or not user_id.strip():
        raise ValidationError("A recipient principal (user_id) is required")
    if not message or not message.strip():
        raise ValidationError("A notification message is required")

    notification = await insert_notification(session, user_id=user_id, message=message)
    logger.info("Notification #%s created for %s", notification.id, user_id)
    return notification


async def mark_read(
    session: AsyncSession,
    notification_id: int,
    *,
    user_id: str | None = None,
) -> Notification:
    """Mark a notification read. Idempotent.

    When ``user_id`` is given, a notification belonging to someone else is
    reported as not found.
    """
    if user_id is not None:
        existing = await get_notification(session, notification_id)
        if existing is None or existing.user_id != user_id:
            raise NotFoundError(f"Notification #{notification_id} not found")

    notification = await mark_notification_read(session, notification_id)
    if notification is None:
        raise NotFoundError(f"Notification #{notification_id} not found")
    return notification


async def list_for_user(
    session: AsyncSession,
    user_id: str,
    *,
    unread_only: bool = False,
) -> tuple[list[Notification], int]:
    """Return a principal's notifications, newest first, with the unread count."""
    notifications = await list_notifications(session, user_id=user_id, unread_only=unread_only)
    unread = sum(1 for n in notifications if not n.read)
    return notifications, unread


async def run_monthly_batch(session: AsyncSession) -> int:
    """Send the monthly reminder to every principal with an application.

    Fan-out is over distinct applicants, so a customer with several
    applications still gets one reminder per run. Running twice sends twice.
    Returns the number of notifications created.
    """
    user_ids = await list_applicant_ids(session)
    created = await insert_notifications(
        session, user_ids=user_ids, message=settings.MONTHLY_REMINDER_MESSAGE
    )
    logger.info("Monthly batch created %d notifications", created)
    return created
