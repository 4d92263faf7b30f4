from typing import List

from sqlalchemy import update
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase, SortDirection
from vocaman.models.notification import Notification
from vocaman.schemas.notification import NotificationCreate


class CRUDNotification(CRUDBase[Notification, NotificationCreate, NotificationCreate]):
    def list_for_user(self, db: Session, *, user_id: int) -> List[Notification]:
        """用户的通知，最新的在前"""
        return self.get_multi(
            db,
            filter_conditions={"recipient_user_id": user_id},
            sort_by=[("created_at", SortDirection.DESC), ("id", SortDirection.DESC)],
        )

    def mark_read(self, db: Session, *, notification_id: int, user_id: int) -> int:
        result = db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.recipient_user_id == user_id)
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


notification = CRUDNotification(Notification)
