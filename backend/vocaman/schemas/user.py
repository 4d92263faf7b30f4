from typing import Any, Dict, List, Literal

from pydantic import EmailStr, field_validator

from vocaman.schemas.base import ApiModel, IdStr


class UserProfile(ApiModel):
    """个人资料响应模型"""
    user_id: IdStr
    email: str
    nickname: str
    role: str
    mileage: int


class ProfileUpdate(ApiModel):
    nickname: str

    @field_validator("nickname")
    @classmethod
    def strip_nickname(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("nickname must not be empty")
        return value


class ProfileUpdateResponse(ApiModel):
    nickname: str


class RelationRequestCreate(ApiModel):
    child_email: EmailStr


class RelationRequestResponse(ApiModel):
    relation_id: IdStr


class RelationDecision(ApiModel):
    status: Literal["approved", "rejected"]


class RelationEntry(ApiModel):
    """关联列表中的一条记录，user_id/nickname/email 为对方用户信息"""
    relation_id: IdStr
    status: str
    user_id: IdStr
    nickname: str
    email: str


class RelationOverview(ApiModel):
    pending_received: List[RelationEntry]
    pending_sent: List[RelationEntry]
    parents: List[RelationEntry]
    children: List[RelationEntry]


class UserStatsResponse(ApiModel):
    language_pair_code: str
    wins: int = 0
    losses: int = 0
    current_streak: int = 0
    best_streak: int = 0


# 设置为任意 JSON 对象，整体覆盖保存
UserSettings = Dict[str, Any]
