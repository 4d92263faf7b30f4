import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from vocaman.core.exceptions import DatasetNotFound, NotFound, TermNotFound
from vocaman.crud.crud_content import get_dataset_cards
from vocaman.crud.crud_content import term as crud_term
from vocaman.crud.crud_dataset import dataset as crud_dataset
from vocaman.crud.crud_game import game_log as crud_game_log
from vocaman.crud.crud_game import user_stats as crud_user_stats
from vocaman.db.database import transaction
from vocaman.models.dataset import Dataset
from vocaman.schemas.game import (
    GameConcept,
    GameDatasetInfo,
    GameHint,
    GameLogCreate,
    GameSession,
    GameTerm,
)

logger = logging.getLogger(__name__)


def language_pair_code(ds: Dataset) -> str:
    """统计表使用的语言对编码，例如 'ko-en'"""
    return f"{ds.source_language_code}-{ds.target_language_code}"


def build_concepts(rows) -> List[GameConcept]:
    """
    把 概念 × 单词 × 提示 的平铺行折叠为嵌套结构。

    行已按概念、单词、提示排序；没有提示的单词对应一行 hint_id 为空的记录。
    """
    concepts: Dict[int, GameConcept] = {}
    terms: Dict[int, GameTerm] = {}
    for row in rows:
        concept = concepts.get(row.concept_id)
        if concept is None:
            concept = GameConcept(concept_id=row.concept_id, image_url=row.image_url, terms=[])
            concepts[row.concept_id] = concept

        term = terms.get(row.term_id)
        if term is None:
            term = GameTerm(
                term_id=row.term_id,
                language_code=row.language_code,
                text=row.text,
                audio_ref=row.audio_ref,
                hints=[],
            )
            terms[row.term_id] = term
            concept.terms.append(term)

        if row.hint_id is not None:
            term.hints.append(
                GameHint(
                    hint_id=row.hint_id,
                    type=row.hint_type,
                    content=row.hint_content,
                    language_code=row.hint_language_code,
                )
            )
    return list(concepts.values())


class GameService:
    def __init__(self, db: Session):
        self.db = db

    def compose_session(self, dataset_id: int) -> GameSession:
        ds = crud_dataset.get(self.db, dataset_id)
        if ds is None:
            raise DatasetNotFound()
        return self._compose(ds)

    def compose_default_session(self, grade: int) -> GameSession:
        """该年级推荐的第一个官方单词集"""
        ds = crud_dataset.first_official_for_grade(self.db, grade=grade)
        if ds is None:
            raise NotFound(f"No official dataset is recommended for grade {grade}")
        return self._compose(ds)

    def _compose(self, ds: Dataset) -> GameSession:
        rows = get_dataset_cards(self.db, dataset_id=ds.id)
        return GameSession(
            dataset_info=GameDatasetInfo(
                dataset_id=ds.id,
                name=ds.name,
                source_language_code=ds.source_language_code,
                target_language_code=ds.target_language_code,
                owner_user_id=ds.owner_user_id,
                is_official=ds.is_official,
                recommended_grade=ds.recommended_grade,
            ),
            concepts=build_concepts(rows),
        )

    def log_result(self, *, user_id: int, log_in: GameLogCreate) -> int:
        """
        记录一次答题结果，并更新该单词集语言对下的胜负与连胜统计。

        Returns:
            int: 新日志的ID
        """
        with transaction(self.db):
            ds = crud_dataset.get(self.db, log_in.dataset_id)
            if ds is None:
                raise DatasetNotFound()
            if crud_term.get(self.db, log_in.term_id) is None:
                raise TermNotFound()

            new_log = crud_game_log.create(self.db, obj_in={**log_in.model_dump(), "user_id": user_id})
            stats = crud_user_stats.record_result(
                self.db,
                user_id=user_id,
                language_pair_code=language_pair_code(ds),
                was_correct=log_in.was_correct,
            )
            log_id = new_log.id
            current_streak = stats.current_streak

        logger.info(f"Game log {log_id} recorded for user {user_id}, current streak {current_streak}")
        return log_id
