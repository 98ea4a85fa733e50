import logging
from sqlalchemy.ext.asyncio import AsyncSession
from groupgrade.models.notification import Notification, TYPE_PRESSURE_ALERT

logger = logging.getLogger(__name__)

async def notify_user(db: AsyncSession, user_id: int, title: str, message: str) -> bool:
    """Fire-and-forget: store a notification for the user; failures are logged, never raised.

    Callers commit their own writes before notifying, so the rollback here only
    discards the notification.
    """
    try:
        db.add(Notification(
            user_id=user_id,
            title=title[:255],
            message=message[:1000],
            notification_type=TYPE_PRESSURE_ALERT,
        ))
        await db.commit()
        logger.info("Notified user %s: %s", user_id, title)
        return True
    except Exception:
        logger.exception("Failed to notify user %s: %s", user_id, title)
        await db.rollback()
        return False
