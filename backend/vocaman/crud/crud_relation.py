from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import and_, or_, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase
from vocaman.models.user import User
from vocaman.models.user_relation import UserRelation


class CRUDRelation(CRUDBase[UserRelation, BaseModel, BaseModel]):
    def get_approved(self, db: Session, *, parent_user_id: int, child_user_id: int) -> Optional[UserRelation]:
        query = select(UserRelation).where(
            UserRelation.parent_user_id == parent_user_id,
            UserRelation.child_user_id == child_user_id,
            UserRelation.status == "approved",
        )
        return db.scalars(query).first()

    def get_active_between(self, db: Session, *, user_a: int, user_b: int) -> Optional[UserRelation]:
        """两用户之间（任一方向）处于 pending 或 approved 的关联"""
        query = select(UserRelation).where(
            or_(
                and_(UserRelation.parent_user_id == user_a, UserRelation.child_user_id == user_b),
                and_(UserRelation.parent_user_id == user_b, UserRelation.child_user_id == user_a),
            ),
            UserRelation.status.in_(("pending", "approved")),
        )
        return db.scalars(query).first()

    def get_for_child(self, db: Session, *, relation_id: int, child_user_id: int) -> Optional[UserRelation]:
        query = select(UserRelation).where(
            UserRelation.id == relation_id,
            UserRelation.child_user_id == child_user_id,
        )
        return db.scalars(query).first()

    def list_as_parent(self, db: Session, *, user_id: int) -> List[Row]:
        """当前用户作为家长的关联，附带孩子信息"""
        query = (
            select(UserRelation.id, UserRelation.status, User.id.label("user_id"), User.nickname, User.email)
            .join(User, UserRelation.child_user_id == User.id)
            .where(UserRelation.parent_user_id == user_id)
            .order_by(UserRelation.id)
        )
        return list(db.execute(query).all())

    def list_as_child(self, db: Session, *, user_id: int) -> List[Row]:
        """当前用户作为孩子的关联，附带家长信息"""
        query = (
            select(UserRelation.id, UserRelation.status, User.id.label("user_id"), User.nickname, User.email)
            .join(User, UserRelation.parent_user_id == User.id)
            .where(UserRelation.child_user_id == user_id)
            .order_by(UserRelation.id)
        )
        return list(db.execute(query).all())

    def resolve_pending(self, db: Session, *, relation_id: int, status: str) -> int:
        """仅当关联仍为 pending 时更新状态，返回受影响的行数"""
        result = db.execute(
            update(UserRelation)
            .where(UserRelation.id == relation_id, UserRelation.status == "pending")
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


relation = CRUDRelation(UserRelation)
