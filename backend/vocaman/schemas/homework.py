from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from vocaman.schemas.base import ApiModel, IdStr


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProgressStatus(str, Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class ProgressOutcome(str, Enum):
    """孩子提交时只能给出 correct 或 incorrect"""
    CORRECT = "correct"
    INCORRECT = "incorrect"


class AssignmentCreate(ApiModel):
    child_user_id: int
    dataset_id: int
    reward: int = Field(0, ge=0)


class AssignmentCreated(ApiModel):
    assignment_id: IdStr


class AssignmentPatch(ApiModel):
    """作业修改补丁

    只有请求中显式出现的字段会进入 UPDATE 语句（model_dump(exclude_unset=True)）。
    """
    reward: Optional[int] = Field(None, ge=0)
    status: Optional[AssignmentStatus] = None


class AssignmentOut(ApiModel):
    assignment_id: IdStr
    parent_user_id: IdStr
    child_user_id: IdStr
    dataset_id: IdStr
    status: AssignmentStatus
    reward: int
    reward_disbursed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    dataset_name: Optional[str] = None
    parent_nickname: Optional[str] = None
    child_nickname: Optional[str] = None
    source_language_code: Optional[str] = None
    target_language_code: Optional[str] = None


class ProgressSubmit(ApiModel):
    assignment_id: int
    term_id: int
    status: ProgressOutcome


class ProgressSubmitted(ApiModel):
    accepted: bool = True
    reward_earned: int = 0


class ProgressRecordOut(ApiModel):
    term_id: IdStr
    status: ProgressStatus
    submitted_at: Optional[datetime] = None
    term_text: Optional[str] = None
    term_language: Optional[str] = None
