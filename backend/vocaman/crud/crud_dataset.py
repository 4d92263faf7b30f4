from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase
from vocaman.models.content import Term
from vocaman.models.dataset import Dataset, DatasetConcept
from vocaman.models.user import User
from vocaman.schemas.dataset import DatasetCreate, DatasetUpdate


class CRUDDataset(CRUDBase[Dataset, DatasetCreate, DatasetUpdate]):
    def _with_owner(self):
        concept_count = (
            select(func.count())
            .select_from(DatasetConcept)
            .where(DatasetConcept.dataset_id == Dataset.id)
            .correlate(Dataset)
            .scalar_subquery()
        )
        return (
            select(Dataset, User.nickname.label("owner_nickname"), concept_count.label("concept_count"))
            .join(User, Dataset.owner_user_id == User.id)
        )

    def list_with_owner(self, db: Session) -> List[Row]:
        query = self._with_owner().order_by(Dataset.created_at.desc(), Dataset.id.desc())
        return list(db.execute(query).all())

    def get_with_owner(self, db: Session, dataset_id: int) -> Optional[Row]:
        return db.execute(self._with_owner().where(Dataset.id == dataset_id)).first()

    def apply_patch(self, db: Session, *, dataset_id: int, patch: DatasetUpdate) -> int:
        values = patch.model_dump(exclude_unset=True, exclude_none=True)
        result = db.execute(
            update(Dataset)
            .where(Dataset.id == dataset_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def first_official_for_grade(self, db: Session, *, grade: int) -> Optional[Dataset]:
        query = (
            select(Dataset)
            .where(Dataset.is_official.is_(True), Dataset.recommended_grade == grade)
            .order_by(Dataset.id)
            .limit(1)
        )
        return db.scalars(query).first()

    # --- 单词集成员（概念） ---

    def has_concept(self, db: Session, *, dataset_id: int, concept_id: int) -> bool:
        return db.get(DatasetConcept, (dataset_id, concept_id)) is not None

    def add_concept(self, db: Session, *, dataset_id: int, concept_id: int) -> None:
        db.add(DatasetConcept(dataset_id=dataset_id, concept_id=concept_id))
        db.flush()

    def remove_concept(self, db: Session, *, dataset_id: int, concept_id: int) -> int:
        result = db.execute(
            delete(DatasetConcept)
            .where(DatasetConcept.dataset_id == dataset_id, DatasetConcept.concept_id == concept_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def remove_all_concepts(self, db: Session, *, dataset_id: int) -> int:
        result = db.execute(
            delete(DatasetConcept)
            .where(DatasetConcept.dataset_id == dataset_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # --- 单词集可达的单词 ---

    def count_terms(self, db: Session, *, dataset_id: int) -> int:
        """通过概念成员关系可达的不同单词数量"""
        query = (
            select(func.count(func.distinct(Term.id)))
            .select_from(DatasetConcept)
            .join(Term, Term.concept_id == DatasetConcept.concept_id)
            .where(DatasetConcept.dataset_id == dataset_id)
        )
        return db.scalar(query) or 0

    def has_term(self, db: Session, *, dataset_id: int, term_id: int) -> bool:
        query = (
            select(Term.id)
            .join(DatasetConcept, Term.concept_id == DatasetConcept.concept_id)
            .where(DatasetConcept.dataset_id == dataset_id, Term.id == term_id)
            .limit(1)
        )
        return db.scalar(query) is not None


dataset = CRUDDataset(Dataset)
