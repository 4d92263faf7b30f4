from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocaman.api.deps import get_current_user
from vocaman.config.dependency_injection import get_db
from vocaman.core.exceptions import Forbidden, NotFound
from vocaman.crud.crud_notification import notification as crud_notification
from vocaman.db.database import transaction
from vocaman.schemas.auth import AuthUser
from vocaman.schemas.notification import NotificationListResponse, NotificationOut
from vocaman.schemas.response import StandardResponse

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """当前用户的通知（最新的在前）以及未读数量"""
    notifications = crud_notification.list_for_user(db, user_id=current_user.user_id)
    items = [
        NotificationOut(
            notification_id=n.id,
            type=n.type,
            message=n.message,
            is_read=n.is_read,
            related_entity_type=n.related_entity_type,
            related_entity_id=n.related_entity_id,
            created_at=n.created_at,
        )
        for n in notifications
    ]
    return NotificationListResponse(data=items, unread_count=sum(1 for n in items if not n.is_read))


@router.post("/{notification_id}/read", response_model=StandardResponse)
def mark_notification_read(
    notification_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        db_notification = crud_notification.get(db, notification_id)
        if db_notification is None:
            raise NotFound("Notification not found")
        if db_notification.recipient_user_id != current_user.user_id:
            raise Forbidden("This notification belongs to another user")
        crud_notification.mark_read(db, notification_id=notification_id, user_id=current_user.user_id)
    return StandardResponse(message="Notification marked as read")
