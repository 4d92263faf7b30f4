import logging
from typing import List

from sqlalchemy.orm import Session

from vocaman.core.exceptions import (
    Conflict,
    DatasetNotFound,
    Forbidden,
    NoFieldsProvided,
    NotFound,
)
from vocaman.crud.crud_content import concept as crud_concept
from vocaman.crud.crud_content import hint as crud_hint
from vocaman.crud.crud_content import term as crud_term
from vocaman.crud.crud_dataset import dataset as crud_dataset
from vocaman.crud.crud_homework import count_assignments_for_dataset
from vocaman.db.database import transaction
from vocaman.models.dataset import Dataset
from vocaman.schemas.dataset import CustomWordCreate, DatasetCreate, DatasetOut, DatasetUpdate

logger = logging.getLogger(__name__)

# 只有这些角色可以创建单词集
DATASET_CREATOR_ROLES = ("parent", "admin")


def _to_dataset_out(row) -> DatasetOut:
    ds = row[0]
    return DatasetOut(
        dataset_id=ds.id,
        name=ds.name,
        source_language_code=ds.source_language_code,
        target_language_code=ds.target_language_code,
        owner_user_id=ds.owner_user_id,
        owner_nickname=row.owner_nickname,
        is_official=ds.is_official,
        recommended_grade=ds.recommended_grade,
        concept_count=row.concept_count or 0,
        created_at=ds.created_at,
    )


class DatasetService:
    def __init__(self, db: Session):
        self.db = db

    def _get_owned(self, dataset_id: int, owner_id: int) -> Dataset:
        ds = crud_dataset.get(self.db, dataset_id)
        if ds is None:
            raise DatasetNotFound()
        if ds.owner_user_id != owner_id:
            raise Forbidden("Only the dataset owner can modify it")
        return ds

    def create_dataset(self, *, owner_id: int, role: str, data: DatasetCreate) -> int:
        if role not in DATASET_CREATOR_ROLES:
            raise Forbidden("Only parents can create datasets")
        values = data.model_dump()
        if role != "admin":
            # 只有管理员可以发布官方单词集
            values["is_official"] = False
        with transaction(self.db):
            new_dataset = crud_dataset.create(self.db, obj_in={**values, "owner_user_id": owner_id})
            dataset_id = new_dataset.id
        logger.info(f"User {owner_id} created dataset {dataset_id}")
        return dataset_id

    def list_datasets(self) -> List[DatasetOut]:
        return [_to_dataset_out(row) for row in crud_dataset.list_with_owner(self.db)]

    def get_dataset(self, dataset_id: int) -> DatasetOut:
        row = crud_dataset.get_with_owner(self.db, dataset_id)
        if row is None:
            raise DatasetNotFound()
        return _to_dataset_out(row)

    def update_dataset(self, *, owner_id: int, dataset_id: int, patch: DatasetUpdate) -> None:
        if not patch.model_dump(exclude_unset=True, exclude_none=True):
            raise NoFieldsProvided()
        with transaction(self.db):
            self._get_owned(dataset_id, owner_id)
            crud_dataset.apply_patch(self.db, dataset_id=dataset_id, patch=patch)
        logger.info(f"User {owner_id} updated dataset {dataset_id}")

    def delete_dataset(self, *, owner_id: int, dataset_id: int) -> None:
        """删除单词集：先删除概念关联，再删除单词集本身；仍被作业引用时拒绝删除"""
        with transaction(self.db):
            self._get_owned(dataset_id, owner_id)
            if count_assignments_for_dataset(self.db, dataset_id) > 0:
                raise Conflict("Dataset is still used by homework assignments")
            crud_dataset.remove_all_concepts(self.db, dataset_id=dataset_id)
            crud_dataset.remove(self.db, obj_id=dataset_id)
        logger.info(f"User {owner_id} deleted dataset {dataset_id}")

    def add_concept(self, *, owner_id: int, dataset_id: int, concept_id: int) -> None:
        with transaction(self.db):
            self._get_owned(dataset_id, owner_id)
            if crud_concept.get(self.db, concept_id) is None:
                raise NotFound("Concept not found")
            if crud_dataset.has_concept(self.db, dataset_id=dataset_id, concept_id=concept_id):
                raise Conflict("Concept is already part of this dataset")
            crud_dataset.add_concept(self.db, dataset_id=dataset_id, concept_id=concept_id)
        logger.info(f"Concept {concept_id} added to dataset {dataset_id}")

    def remove_concept(self, *, owner_id: int, dataset_id: int, concept_id: int) -> None:
        with transaction(self.db):
            self._get_owned(dataset_id, owner_id)
            if crud_dataset.remove_concept(self.db, dataset_id=dataset_id, concept_id=concept_id) == 0:
                raise NotFound("Concept is not part of this dataset")
        logger.info(f"Concept {concept_id} removed from dataset {dataset_id}")

    def add_custom_word(self, *, owner_id: int, dataset_id: int, word: CustomWordCreate) -> int:
        """
        向单词集添加自定义单词。

        使用已有概念或以 image_url 新建概念，随后插入全部单词和提示，
        并在概念尚未关联时把它加入单词集。所有写入在同一事务中完成。

        Returns:
            int: 单词所属概念的ID
        """
        with transaction(self.db):
            self._get_owned(dataset_id, owner_id)
            if word.concept_id is not None:
                if crud_concept.get(self.db, word.concept_id) is None:
                    raise NotFound("Concept not found")
                concept_id = word.concept_id
            else:
                concept_id = crud_concept.create(
                    self.db,
                    obj_in={"image_url": word.image_url, "created_by": owner_id},
                ).id

            for term_in in word.terms:
                new_term = crud_term.create(
                    self.db,
                    obj_in={
                        "concept_id": concept_id,
                        "language_code": term_in.language_code,
                        "text": term_in.text,
                        "audio_ref": term_in.audio_ref,
                    },
                )
                for hint_in in term_in.hints:
                    crud_hint.create(self.db, obj_in={**hint_in.model_dump(), "term_id": new_term.id})

            if not crud_dataset.has_concept(self.db, dataset_id=dataset_id, concept_id=concept_id):
                crud_dataset.add_concept(self.db, dataset_id=dataset_id, concept_id=concept_id)

        logger.info(f"User {owner_id} added {len(word.terms)} custom terms to dataset {dataset_id} (concept {concept_id})")
        return concept_id
