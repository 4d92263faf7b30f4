from sqlalchemy import Column, BigInteger, Integer, String, Boolean, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class Notification(Base):
    """站内通知"""
    __tablename__ = "notifications"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    recipient_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    type = Column(String(50), nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    related_entity_type = Column(String(50), nullable=True)
    related_entity_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=local_now)
