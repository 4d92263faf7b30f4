from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vocaman.schemas.base import ApiModel, IdStr
from vocaman.schemas.response import StandardResponse


class NotificationCreate(ApiModel):
    """通知写入任务的参数"""
    recipient_user_id: int
    type: str
    message: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None


class NotificationOut(ApiModel):
    notification_id: IdStr
    type: str
    message: str
    is_read: bool
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[IdStr] = None
    created_at: Optional[datetime] = None


class NotificationListResponse(StandardResponse[List[NotificationOut]]):
    """通知列表响应，在标准响应之外附带未读数量"""
    unread_count: int = Field(0, serialization_alias="unreadCount")
