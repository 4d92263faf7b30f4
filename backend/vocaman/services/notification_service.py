import logging
from typing import Optional

from kombu.exceptions import OperationalError

from vocaman.schemas.notification import NotificationCreate
from vocaman.tasks.notification_tasks import create_notification_task

logger = logging.getLogger(__name__)

DB_WRITER_QUEUE = "db_writer_queue"


class NotificationDispatcher:
    """
    通知分发器

    在业务事务提交之后调用，把通知写入任务投递到 db_writer_queue。
    投递失败只记录日志，不影响已经提交的业务结果。
    """

    def __init__(self, queue: str = DB_WRITER_QUEUE):
        self.queue = queue

    def dispatch(
        self,
        *,
        recipient_user_id: int,
        type: str,
        message: str,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[int] = None,
    ) -> None:
        payload = NotificationCreate(
            recipient_user_id=recipient_user_id,
            type=type,
            message=message,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
        )
        try:
            create_notification_task.apply_async(args=[payload.model_dump()], queue=self.queue)
        except OperationalError as e:
            logger.error(f"Failed to enqueue '{type}' notification for user {recipient_user_id}: {e}")
            return
        logger.info(f"Enqueued '{type}' notification for user {recipient_user_id}")
