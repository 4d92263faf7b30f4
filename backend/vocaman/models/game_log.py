from sqlalchemy import Column, BigInteger, Integer, String, Boolean, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class GameLog(Base):
    """单次答题记录"""
    __tablename__ = "game_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    term_id = Column(ForeignKey("terms.id"), nullable=False)
    dataset_id = Column(ForeignKey("datasets.id"), nullable=False)
    was_correct = Column(Boolean, nullable=False)
    attempts = Column(Integer, nullable=False, default=1)
    source = Column(String(20), nullable=False, default="game")
    created_at = Column(DateTime, default=local_now)
