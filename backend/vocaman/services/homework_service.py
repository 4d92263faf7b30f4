"""
作业生命周期服务

负责作业的布置、进度提交、完成判定和奖励发放。状态只会沿
assigned -> in_progress -> completed 前进（cancelled 只能由家长手动设置），
奖励在整个作业生命周期内至多发放一次。
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from vocaman.core.exceptions import (
    AlreadyCompleted,
    AssignmentCancelled,
    AssignmentNotFound,
    Conflict,
    DatasetNotFound,
    Forbidden,
    NoFieldsProvided,
    RelationNotApproved,
    TermNotFound,
    ValidationError,
)
from vocaman.core.timeutils import local_now
from vocaman.crud.crud_dataset import dataset as crud_dataset
from vocaman.crud.crud_homework import assignment as crud_assignment
from vocaman.crud.crud_homework import homework_progress as crud_progress
from vocaman.crud.crud_relation import relation as crud_relation
from vocaman.crud.crud_user import user as crud_user
from vocaman.db.database import transaction
from vocaman.models.homework import HomeworkAssignment
from vocaman.schemas.homework import (
    AssignmentOut,
    AssignmentPatch,
    AssignmentStatus,
    ProgressOutcome,
    ProgressRecordOut,
    ProgressStatus,
    ProgressSubmitted,
)
from vocaman.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def is_complete(total_terms: int, correct_count: int) -> bool:
    """
    完成判定：单词集至少包含一个单词，且答对的不同单词数不少于单词总数。

    空单词集永远不会被判定为完成。
    """
    return total_terms > 0 and correct_count >= total_terms


def _to_assignment_out(assignment: HomeworkAssignment, **extra) -> AssignmentOut:
    return AssignmentOut(
        assignment_id=assignment.id,
        parent_user_id=assignment.parent_user_id,
        child_user_id=assignment.child_user_id,
        dataset_id=assignment.dataset_id,
        status=assignment.status,
        reward=assignment.reward,
        reward_disbursed_at=assignment.reward_disbursed_at,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
        **extra,
    )


class HomeworkService:
    def __init__(self, db: Session, notifier: Optional[NotificationDispatcher] = None):
        self.db = db
        self.notifier = notifier

    # --- 布置 ---

    def assign_homework(self, *, parent_id: int, child_id: int, dataset_id: int, reward: int = 0) -> int:
        """
        家长给已建立关联的孩子布置作业。

        Args:
            parent_id: 家长用户ID（来自已认证的令牌）
            child_id: 孩子用户ID
            dataset_id: 单词集ID
            reward: 完成奖励，非负整数

        Returns:
            int: 新作业的ID

        Raises:
            RelationNotApproved: 家长与孩子之间没有已批准的关联
            DatasetNotFound: 单词集不存在
        """
        if reward < 0:
            raise ValidationError("Reward must be a non-negative integer")
        with transaction(self.db):
            if crud_relation.get_approved(self.db, parent_user_id=parent_id, child_user_id=child_id) is None:
                raise RelationNotApproved()
            if crud_dataset.get(self.db, dataset_id) is None:
                raise DatasetNotFound()

            new_assignment = crud_assignment.create(
                self.db,
                obj_in={
                    "parent_user_id": parent_id,
                    "child_user_id": child_id,
                    "dataset_id": dataset_id,
                    "status": AssignmentStatus.ASSIGNED.value,
                    "reward": reward,
                },
            )
            assignment_id = new_assignment.id

        logger.info(f"Parent {parent_id} assigned homework {assignment_id} (dataset {dataset_id}) to child {child_id}")
        self._notify(
            recipient_user_id=child_id,
            type="homework_assigned",
            message="You have new homework!",
            related_entity_id=assignment_id,
        )
        return assignment_id

    # --- 进度提交 ---

    def submit_progress(
        self,
        *,
        child_id: int,
        assignment_id: int,
        term_id: int,
        outcome: ProgressOutcome,
    ) -> ProgressSubmitted:
        """
        记录孩子对一个单词的作答结果，并在全部答对时完成作业、发放奖励。

        整个过程在一个事务中执行，作业行在读取时加锁，
        同一作业的并发提交按顺序处理。

        Returns:
            ProgressSubmitted: reward_earned 为本次提交实际发放的积分（未完成或已结算时为 0）

        Raises:
            AssignmentNotFound: 作业不存在
            Forbidden: 作业不属于该孩子
            AlreadyCompleted: 作业已完成
            AssignmentCancelled: 作业已取消
            TermNotFound: 单词不属于作业对应的单词集
        """
        outcome = ProgressOutcome(outcome)
        with transaction(self.db):
            assignment = crud_assignment.get_for_update(self.db, assignment_id)
            if assignment is None:
                raise AssignmentNotFound()
            if assignment.child_user_id != child_id:
                raise Forbidden("This homework is not assigned to you")
            if assignment.status == AssignmentStatus.COMPLETED.value:
                raise AlreadyCompleted()
            if assignment.status == AssignmentStatus.CANCELLED.value:
                raise AssignmentCancelled()
            if not crud_dataset.has_term(self.db, dataset_id=assignment.dataset_id, term_id=term_id):
                raise TermNotFound("Term is not part of this homework's dataset")

            if assignment.status == AssignmentStatus.ASSIGNED.value:
                assignment.status = AssignmentStatus.IN_PROGRESS.value
                logger.info(f"Homework {assignment_id} started by child {child_id}")

            now = local_now()
            crud_progress.upsert(
                self.db,
                assignment_id=assignment_id,
                term_id=term_id,
                status=ProgressStatus(outcome.value),
                submitted_at=now,
            )
            reward_earned = self.settle_completion(assignment, now=now)
            completed = assignment.status == AssignmentStatus.COMPLETED.value

        if completed:
            logger.info(f"Homework {assignment_id} completed by child {child_id}, reward earned: {reward_earned}")
        if reward_earned > 0:
            self._notify(
                recipient_user_id=child_id,
                type="homework_completed",
                message=f"Homework complete! You earned {reward_earned} points.",
                related_entity_id=assignment_id,
            )
        return ProgressSubmitted(accepted=True, reward_earned=reward_earned)

    def settle_completion(self, assignment: HomeworkAssignment, *, now: Optional[datetime] = None) -> int:
        """
        检查作业是否已全部答对；是则标记完成并尝试结算奖励。

        奖励结算依赖 reward_disbursed_at 上的条件更新，只有第一次成功占位的调用
        会给孩子加积分。必须在调用方的事务内、持有作业行锁时调用。

        Returns:
            int: 本次调用发放的积分
        """
        total_terms = crud_dataset.count_terms(self.db, dataset_id=assignment.dataset_id)
        correct_count = crud_progress.count_correct(self.db, assignment_id=assignment.id)
        if not is_complete(total_terms, correct_count):
            return 0

        assignment.status = AssignmentStatus.COMPLETED.value
        self.db.flush()

        if not crud_assignment.claim_reward(self.db, assignment_id=assignment.id, disbursed_at=now or local_now()):
            logger.warning(f"Reward for homework {assignment.id} was already settled, skipping")
            return 0
        if assignment.reward <= 0:
            return 0

        crud_user.add_mileage(self.db, user_id=assignment.child_user_id, amount=assignment.reward)
        logger.info(f"Credited {assignment.reward} mileage to user {assignment.child_user_id} for homework {assignment.id}")
        return assignment.reward

    # --- 查询 ---

    def list_assigned_to(self, child_id: int) -> List[AssignmentOut]:
        rows = crud_assignment.list_for_child(self.db, child_user_id=child_id)
        return [
            _to_assignment_out(row[0], dataset_name=row.dataset_name, parent_nickname=row.parent_nickname)
            for row in rows
        ]

    def list_created_by(self, parent_id: int) -> List[AssignmentOut]:
        rows = crud_assignment.list_for_parent(self.db, parent_user_id=parent_id)
        return [
            _to_assignment_out(row[0], dataset_name=row.dataset_name, child_nickname=row.child_nickname)
            for row in rows
        ]

    def get_assignment_details(self, *, user_id: int, assignment_id: int) -> AssignmentOut:
        """作业详情，只有布置作业的家长和接受作业的孩子可以查看"""
        row = crud_assignment.get_detail(self.db, assignment_id)
        if row is None:
            raise AssignmentNotFound()
        assignment = row[0]
        if user_id not in (assignment.parent_user_id, assignment.child_user_id):
            raise Forbidden("You do not have access to this homework")
        return _to_assignment_out(
            assignment,
            dataset_name=row.dataset_name,
            parent_nickname=row.parent_nickname,
            child_nickname=row.child_nickname,
            source_language_code=row.source_language_code,
            target_language_code=row.target_language_code,
        )

    def get_progress(self, *, parent_id: int, assignment_id: int) -> List[ProgressRecordOut]:
        """家长查看作业的逐词进度"""
        assignment = crud_assignment.get(self.db, assignment_id)
        if assignment is None:
            raise AssignmentNotFound()
        if assignment.parent_user_id != parent_id:
            raise Forbidden("Only the assigning parent can view this progress")
        rows = crud_progress.list_with_terms(self.db, assignment_id=assignment_id)
        return [
            ProgressRecordOut(
                term_id=row.term_id,
                status=row.status,
                submitted_at=row.submitted_at,
                term_text=row.term_text,
                term_language=row.term_language,
            )
            for row in rows
        ]

    # --- 家长维护 ---

    def update_assignment(self, *, parent_id: int, assignment_id: int, patch: AssignmentPatch) -> None:
        """
        家长修改奖励或状态。

        手动把状态改为 completed 不会发放奖励；奖励只在进度提交触发的完成判定中结算。

        Raises:
            NoFieldsProvided: 补丁中没有任何可更新字段
        """
        if not patch.model_dump(exclude_unset=True, exclude_none=True):
            raise NoFieldsProvided()

        with transaction(self.db):
            assignment = crud_assignment.get_for_update(self.db, assignment_id)
            if assignment is None:
                raise AssignmentNotFound()
            if assignment.parent_user_id != parent_id:
                raise Forbidden("Only the assigning parent can modify this homework")
            if crud_assignment.apply_patch(self.db, assignment_id=assignment_id, patch=patch) == 0:
                raise Conflict("Homework could not be updated")

        logger.info(f"Parent {parent_id} updated homework {assignment_id}: {patch.model_dump(exclude_unset=True, exclude_none=True)}")

    def delete_assignment(self, *, parent_id: int, assignment_id: int) -> None:
        """删除作业及其全部进度记录"""
        with transaction(self.db):
            assignment = crud_assignment.get_for_update(self.db, assignment_id)
            if assignment is None:
                raise AssignmentNotFound()
            if assignment.parent_user_id != parent_id:
                raise Forbidden("Only the assigning parent can delete this homework")
            removed = crud_progress.remove_for_assignment(self.db, assignment_id=assignment_id)
            crud_assignment.remove(self.db, obj_id=assignment_id)

        logger.info(f"Parent {parent_id} deleted homework {assignment_id} ({removed} progress records)")

    def _notify(self, **kwargs) -> None:
        if self.notifier is None:
            return
        self.notifier.dispatch(related_entity_type="homework_assignment", **kwargs)
