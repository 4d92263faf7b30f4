import logging
from typing import Optional

from sqlalchemy.orm import Session

from vocaman.core.exceptions import Conflict, NotFound, ValidationError
from vocaman.crud.crud_relation import relation as crud_relation
from vocaman.crud.crud_user import user as crud_user
from vocaman.db.database import transaction
from vocaman.schemas.user import RelationEntry, RelationOverview
from vocaman.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def _to_entry(row) -> RelationEntry:
    return RelationEntry(
        relation_id=row.id,
        status=row.status,
        user_id=row.user_id,
        nickname=row.nickname,
        email=row.email,
    )


class RelationService:
    """家长-孩子关联：家长发起请求，孩子批准或拒绝"""

    def __init__(self, db: Session, notifier: Optional[NotificationDispatcher] = None):
        self.db = db
        self.notifier = notifier

    def request_relation(self, *, parent_id: int, parent_nickname: str, child_email: str) -> int:
        """
        Returns:
            int: 新建关联的ID

        Raises:
            NotFound: 邮箱对应的用户不存在
            ValidationError: 对自己发起请求
            Conflict: 双方之间已有待处理或已批准的关联
        """
        with transaction(self.db):
            child = crud_user.get_by_email(self.db, email=child_email.lower())
            if child is None:
                raise NotFound("No user is registered with that email")
            if child.id == parent_id:
                raise ValidationError("You cannot send a relation request to yourself")
            if crud_relation.get_active_between(self.db, user_a=parent_id, user_b=child.id) is not None:
                raise Conflict("A relation with this user already exists or is pending")

            new_relation = crud_relation.create(
                self.db,
                obj_in={"parent_user_id": parent_id, "child_user_id": child.id, "status": "pending"},
            )
            relation_id, child_id = new_relation.id, child.id

        logger.info(f"User {parent_id} requested relation {relation_id} with child {child_id}")
        self._notify(
            recipient_user_id=child_id,
            type="relation_request",
            message=f"{parent_nickname} wants to connect with you as your parent.",
            related_entity_id=relation_id,
        )
        return relation_id

    def list_relations(self, user_id: int) -> RelationOverview:
        as_parent = crud_relation.list_as_parent(self.db, user_id=user_id)
        as_child = crud_relation.list_as_child(self.db, user_id=user_id)
        return RelationOverview(
            pending_received=[_to_entry(r) for r in as_child if r.status == "pending"],
            pending_sent=[_to_entry(r) for r in as_parent if r.status == "pending"],
            parents=[_to_entry(r) for r in as_child if r.status == "approved"],
            children=[_to_entry(r) for r in as_parent if r.status == "approved"],
        )

    def handle_request(self, *, child_id: int, child_nickname: str, relation_id: int, status: str) -> None:
        """
        孩子批准或拒绝一条发给自己的关联请求。

        Raises:
            NotFound: 关联不存在或不是发给当前用户的
            ValidationError: 关联已经不是 pending 状态
            Conflict: 并发处理导致状态已被修改
        """
        with transaction(self.db):
            pending = crud_relation.get_for_child(self.db, relation_id=relation_id, child_user_id=child_id)
            if pending is None:
                raise NotFound("Relation request not found")
            if pending.status != "pending":
                raise ValidationError("This relation request has already been handled")
            if crud_relation.resolve_pending(self.db, relation_id=relation_id, status=status) == 0:
                raise Conflict("This relation request was handled concurrently")
            parent_id = pending.parent_user_id

        logger.info(f"Child {child_id} {status} relation {relation_id} from parent {parent_id}")
        self._notify(
            recipient_user_id=parent_id,
            type="relation_response",
            message=f"{child_nickname} has {status} your relation request.",
            related_entity_id=relation_id,
        )

    def _notify(self, **kwargs) -> None:
        if self.notifier is None:
            return
        self.notifier.dispatch(related_entity_type="user_relation", **kwargs)
