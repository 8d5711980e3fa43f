"""
Notification Service
Writes in-app notifications for swap-request lifecycle events.

Two delivery modes:
- create_notification: part of the caller's transaction (approval, rejection)
- send_notification_best_effort: its own unit of work after the caller has
  committed (swap-request creation); failures are logged, never raised
"""

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Notification
from ..shared.errors import NotificationError

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE_SWAP_REQUEST = "swap_request"


def create_notification(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    notification_type: str,
) -> Notification:
    """Insert a notification inside the caller's open transaction (no commit)"""
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        read=False,
    )
    db.add(notification)
    db.flush()
    logger.info(f"🔔 {notification_type} notification queued for user {user_id}: {title}")
    return notification


def send_notification_best_effort(
    db: Session,
    resolve_recipient: Callable[[], int],
    title: str,
    message: str,
    notification_type: str,
) -> dict:
    """
    Resolve the recipient, insert and commit a notification, swallowing failures

    Args:
        db: Database session with no open work of the caller's
        resolve_recipient: Returns the recipient user id; raises NotificationError
            (or a database error) when no recipient can be determined
        title: Notification title
        message: Notification body
        notification_type: Category tag

    Returns:
        Dict with notification_sent status and notification_error text
    """
    result = {"notification_sent": False, "notification_error": None}

    try:
        user_id = resolve_recipient()
        create_notification(db, user_id, title, message, notification_type)
        db.commit()
        result["notification_sent"] = True
        logger.info(f"✅ {notification_type} notification sent to user {user_id}")
    except (NotificationError, SQLAlchemyError) as e:
        db.rollback()
        result["notification_error"] = str(e)
        logger.error(f"❌ Failed to send {notification_type} notification: {e}")

    return result
