from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from vocaman.schemas.base import ApiModel, IdStr


class DatasetCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    source_language_code: str = Field(..., min_length=1, max_length=10)
    target_language_code: str = Field(..., min_length=1, max_length=10)
    is_official: bool = False
    recommended_grade: Optional[int] = Field(None, ge=1)


class DatasetUpdate(ApiModel):
    """单词集修改补丁，只有显式提供的字段会被更新"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    source_language_code: Optional[str] = Field(None, min_length=1, max_length=10)
    target_language_code: Optional[str] = Field(None, min_length=1, max_length=10)


class DatasetCreated(ApiModel):
    dataset_id: IdStr


class DatasetOut(ApiModel):
    dataset_id: IdStr
    name: str
    source_language_code: str
    target_language_code: str
    owner_user_id: IdStr
    owner_nickname: Optional[str] = None
    is_official: bool = False
    recommended_grade: Optional[int] = None
    concept_count: int = 0
    created_at: Optional[datetime] = None


class ConceptMembership(ApiModel):
    concept_id: int


class HintIn(ApiModel):
    hint_type: str = Field(..., min_length=1)
    hint_content: str = Field(..., min_length=1)
    language_code: str = Field(..., min_length=1)


class TermIn(ApiModel):
    language_code: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    audio_ref: Optional[str] = None
    hints: List[HintIn] = []


class CustomWordCreate(ApiModel):
    """自定义单词：使用已有概念（concept_id）或新建概念（image_url），二者必须且只能提供一个"""
    concept_id: Optional[int] = None
    image_url: Optional[str] = None
    terms: List[TermIn] = Field(..., min_length=1)

    @model_validator(mode="after")
    def exactly_one_concept_source(self) -> "CustomWordCreate":
        if self.concept_id is None and not self.image_url:
            raise ValueError("either conceptId or imageUrl is required")
        if self.concept_id is not None and self.image_url:
            raise ValueError("conceptId and imageUrl cannot be combined")
        return self


class CustomWordCreated(ApiModel):
    concept_id: IdStr
