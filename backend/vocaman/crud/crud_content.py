from typing import List

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase, SortDirection
from vocaman.models.content import Concept, Hint, Term
from vocaman.models.dataset import DatasetConcept


class CRUDTerm(CRUDBase[Term, BaseModel, BaseModel]):
    def get_hints(self, db: Session, *, term_id: int) -> List[Hint]:
        return hint.get_multi(
            db,
            filter_conditions={"term_id": term_id},
            sort_by=[("id", SortDirection.ASC)],
        )


def get_dataset_cards(db: Session, *, dataset_id: int) -> List[Row]:
    """
    单词集的全部卡片行：概念 × 单词 × 提示（LEFT JOIN），按概念、单词、提示排序。
    """
    query = (
        select(
            DatasetConcept.concept_id,
            Concept.image_url,
            Term.id.label("term_id"),
            Term.language_code,
            Term.text,
            Term.audio_ref,
            Hint.id.label("hint_id"),
            Hint.hint_type,
            Hint.hint_content,
            Hint.language_code.label("hint_language_code"),
        )
        .join(Concept, DatasetConcept.concept_id == Concept.id)
        .join(Term, Term.concept_id == Concept.id)
        .outerjoin(Hint, Hint.term_id == Term.id)
        .where(DatasetConcept.dataset_id == dataset_id)
        .order_by(DatasetConcept.concept_id, Term.id, Hint.id)
    )
    return list(db.execute(query).all())


concept = CRUDBase[Concept, BaseModel, BaseModel](Concept)
term = CRUDTerm(Term)
hint = CRUDBase[Hint, BaseModel, BaseModel](Hint)
