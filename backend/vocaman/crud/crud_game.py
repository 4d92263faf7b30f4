from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase
from vocaman.db.database import lock_for_write
from vocaman.models.game_log import GameLog
from vocaman.models.user_stats import UserStats


class CRUDUserStats(CRUDBase[UserStats, BaseModel, BaseModel]):
    def get_for_pair(self, db: Session, *, user_id: int, language_pair_code: str) -> Optional[UserStats]:
        return self.get(db, (user_id, language_pair_code))

    def record_result(self, db: Session, *, user_id: int, language_pair_code: str, was_correct: bool) -> UserStats:
        """
        累加胜负并更新连胜：答对时 current_streak + 1，答错清零；
        best_streak 取 best_streak 与新 current_streak 的较大值。
        """
        lock_for_write(db)
        query = (
            select(UserStats)
            .where(UserStats.user_id == user_id, UserStats.language_pair_code == language_pair_code)
            .with_for_update()
        )
        stats = db.scalars(query).first()
        if stats is None:
            stats = UserStats(
                user_id=user_id,
                language_pair_code=language_pair_code,
                wins=0,
                losses=0,
                current_streak=0,
                best_streak=0,
            )
            db.add(stats)

        if was_correct:
            stats.wins += 1
            stats.current_streak += 1
        else:
            stats.losses += 1
            stats.current_streak = 0
        stats.best_streak = max(stats.best_streak, stats.current_streak)
        db.flush()
        return stats


game_log = CRUDBase[GameLog, BaseModel, BaseModel](GameLog)
user_stats = CRUDUserStats(UserStats)
