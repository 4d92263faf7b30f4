from sqlalchemy import Column, BigInteger, Integer, String, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class UserRelation(Base):
    """家长-孩子关联模型

    由家长发起请求（pending），孩子批准（approved）或拒绝（rejected）。
    """
    __tablename__ = "user_relations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    parent_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    child_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, default=local_now)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now)
