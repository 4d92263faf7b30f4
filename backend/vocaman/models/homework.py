from sqlalchemy import Column, BigInteger, Integer, String, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class HomeworkAssignment(Base):
    """作业模型

    家长给孩子布置的一份单词集作业。

    Attributes:
        id: 自增ID
        parent_user_id: 布置作业的家长
        child_user_id: 完成作业的孩子
        dataset_id: 作业对应的单词集
        status: 'assigned'、'in_progress'、'completed' 或 'cancelled'
        reward: 完成后发放的积分
        reward_disbursed_at: 奖励结算时间，为空表示尚未结算；只会被写入一次
        created_at: 创建时间
        updated_at: 更新时间
    """
    __tablename__ = "homework_assignments"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    parent_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    child_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    dataset_id = Column(ForeignKey("datasets.id"), index=True, nullable=False)
    status = Column(String(20), nullable=False, default="assigned")
    reward = Column(Integer, nullable=False, default=0)
    reward_disbursed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=local_now)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now)


class HomeworkProgress(Base):
    """作业进度模型，主键为 (assignment_id, term_id)，重复提交覆盖原记录"""
    __tablename__ = "homework_progress"

    assignment_id = Column(ForeignKey("homework_assignments.id"), primary_key=True)
    term_id = Column(ForeignKey("terms.id"), primary_key=True)
    status = Column(String(20), nullable=False, default="pending")
    submitted_at = Column(DateTime, default=local_now, nullable=False)
