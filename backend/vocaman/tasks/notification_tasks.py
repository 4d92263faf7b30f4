import logging

from vocaman.celery_app import celery_app
from vocaman.crud.crud_notification import notification as crud_notification
from vocaman.db.database import SessionLocal, transaction
from vocaman.schemas.notification import NotificationCreate

logger = logging.getLogger(__name__)


@celery_app.task(name='vocaman.tasks.notification_tasks.create_notification_task')
def create_notification_task(notification_data: dict):
    """一个专门用于写入站内通知的轻量级任务"""
    db = SessionLocal()
    try:
        notification_in = NotificationCreate(**notification_data)
        with transaction(db):
            crud_notification.create(db=db, obj_in=notification_in)
        logger.info(
            f"DB Task: Saved '{notification_in.type}' notification for user {notification_in.recipient_user_id}"
        )
    except Exception as e:
        logger.error(f"DB Task: Error saving notification: {e}")
        raise
    finally:
        db.close()
