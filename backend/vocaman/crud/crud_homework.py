from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session, aliased

from vocaman.crud.base import CRUDBase
from vocaman.db.database import lock_for_write
from vocaman.models.dataset import Dataset
from vocaman.models.content import Term
from vocaman.models.homework import HomeworkAssignment, HomeworkProgress
from vocaman.models.user import User
from vocaman.schemas.homework import AssignmentCreate, AssignmentPatch, ProgressStatus

_parent = aliased(User)
_child = aliased(User)


class CRUDAssignment(CRUDBase[HomeworkAssignment, AssignmentCreate, AssignmentPatch]):
    def get_for_update(self, db: Session, assignment_id: int) -> Optional[HomeworkAssignment]:
        """
        加行锁读取作业（SELECT ... FOR UPDATE），锁持续到事务结束。

        同一作业的并发进度提交会在这里排队，保证状态迁移和奖励结算串行执行。
        """
        lock_for_write(db)
        query = (
            select(HomeworkAssignment)
            .where(HomeworkAssignment.id == assignment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return db.scalars(query).first()

    def get_detail(self, db: Session, assignment_id: int) -> Optional[Row]:
        """作业详情，附带单词集名称、语言对和双方昵称"""
        query = (
            select(
                HomeworkAssignment,
                Dataset.name.label("dataset_name"),
                Dataset.source_language_code,
                Dataset.target_language_code,
                _parent.nickname.label("parent_nickname"),
                _child.nickname.label("child_nickname"),
            )
            .join(Dataset, HomeworkAssignment.dataset_id == Dataset.id)
            .join(_parent, HomeworkAssignment.parent_user_id == _parent.id)
            .join(_child, HomeworkAssignment.child_user_id == _child.id)
            .where(HomeworkAssignment.id == assignment_id)
        )
        return db.execute(query).first()

    def list_for_child(self, db: Session, *, child_user_id: int) -> List[Row]:
        """孩子收到的作业，最新的在前"""
        query = (
            select(
                HomeworkAssignment,
                Dataset.name.label("dataset_name"),
                _parent.nickname.label("parent_nickname"),
            )
            .join(Dataset, HomeworkAssignment.dataset_id == Dataset.id)
            .join(_parent, HomeworkAssignment.parent_user_id == _parent.id)
            .where(HomeworkAssignment.child_user_id == child_user_id)
            .order_by(HomeworkAssignment.created_at.desc(), HomeworkAssignment.id.desc())
        )
        return list(db.execute(query).all())

    def list_for_parent(self, db: Session, *, parent_user_id: int) -> List[Row]:
        """家长布置的作业，最新的在前"""
        query = (
            select(
                HomeworkAssignment,
                Dataset.name.label("dataset_name"),
                _child.nickname.label("child_nickname"),
            )
            .join(Dataset, HomeworkAssignment.dataset_id == Dataset.id)
            .join(_child, HomeworkAssignment.child_user_id == _child.id)
            .where(HomeworkAssignment.parent_user_id == parent_user_id)
            .order_by(HomeworkAssignment.created_at.desc(), HomeworkAssignment.id.desc())
        )
        return list(db.execute(query).all())

    def apply_patch(self, db: Session, *, assignment_id: int, patch: AssignmentPatch) -> int:
        """
        将补丁转换为参数化的 UPDATE 语句。

        Returns:
            int: 受影响的行数
        """
        values = patch.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        result = db.execute(
            update(HomeworkAssignment)
            .where(HomeworkAssignment.id == assignment_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def claim_reward(self, db: Session, *, assignment_id: int, disbursed_at: datetime) -> bool:
        """
        条件更新 reward_disbursed_at（仅当其为空）。

        Returns:
            bool: True 表示本次调用取得了发放权，False 表示奖励已经结算过
        """
        result = db.execute(
            update(HomeworkAssignment)
            .where(
                HomeworkAssignment.id == assignment_id,
                HomeworkAssignment.reward_disbursed_at.is_(None),
            )
            .values(reward_disbursed_at=disbursed_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class CRUDHomeworkProgress(CRUDBase[HomeworkProgress, BaseModel, BaseModel]):
    def upsert(
        self,
        db: Session,
        *,
        assignment_id: int,
        term_id: int,
        status: ProgressStatus,
        submitted_at: datetime
    ) -> None:
        """
        插入或覆盖 (assignment_id, term_id) 的进度记录，不保留历史。

        使用数据库原生的单语句 upsert，同一单词的并发提交不会撞上主键冲突。
        """
        values = {
            "assignment_id": assignment_id,
            "term_id": term_id,
            "status": status.value,
            "submitted_at": submitted_at,
        }
        dialect = db.get_bind().dialect.name
        if dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(HomeworkProgress).values(**values)
            stmt = stmt.on_duplicate_key_update(status=stmt.inserted.status, submitted_at=stmt.inserted.submitted_at)
        elif dialect in ("sqlite", "postgresql"):
            dialect_insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
            stmt = dialect_insert(HomeworkProgress).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[HomeworkProgress.assignment_id, HomeworkProgress.term_id],
                set_={"status": stmt.excluded.status, "submitted_at": stmt.excluded.submitted_at},
            )
        else:
            raise NotImplementedError(f"Progress upsert is not supported on {dialect}")
        db.execute(stmt)

    def count_correct(self, db: Session, *, assignment_id: int) -> int:
        return self.get_count(
            db,
            filter_conditions={"assignment_id": assignment_id, "status": ProgressStatus.CORRECT.value},
        )

    def list_with_terms(self, db: Session, *, assignment_id: int) -> List[Row]:
        """作业的全部进度记录，附带单词文本和语言，最近提交的在前"""
        query = (
            select(
                HomeworkProgress.term_id,
                HomeworkProgress.status,
                HomeworkProgress.submitted_at,
                Term.text.label("term_text"),
                Term.language_code.label("term_language"),
            )
            .join(Term, HomeworkProgress.term_id == Term.id)
            .where(HomeworkProgress.assignment_id == assignment_id)
            .order_by(HomeworkProgress.submitted_at.desc(), HomeworkProgress.term_id)
        )
        return list(db.execute(query).all())

    def remove_for_assignment(self, db: Session, *, assignment_id: int) -> int:
        result = db.execute(
            delete(HomeworkProgress)
            .where(HomeworkProgress.assignment_id == assignment_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


def count_assignments_for_dataset(db: Session, dataset_id: int) -> int:
    query = select(func.count()).select_from(HomeworkAssignment).where(HomeworkAssignment.dataset_id == dataset_id)
    return db.scalar(query) or 0


# 实例化并暴露给服务层使用
assignment = CRUDAssignment(HomeworkAssignment)
homework_progress = CRUDHomeworkProgress(HomeworkProgress)
