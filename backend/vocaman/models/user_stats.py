from sqlalchemy import Column, Integer, String, ForeignKey

from vocaman.db.base_class import Base


class UserStats(Base):
    """按语言对统计的游戏战绩，主键为 (user_id, language_pair_code)"""
    __tablename__ = "user_stats"

    user_id = Column(ForeignKey("users.id"), primary_key=True)
    language_pair_code = Column(String(20), primary_key=True)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    best_streak = Column(Integer, nullable=False, default=0)
