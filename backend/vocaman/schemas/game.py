from typing import List, Optional

from pydantic import Field

from vocaman.schemas.base import ApiModel, IdStr


class GameHint(ApiModel):
    hint_id: IdStr
    type: str
    content: str
    language_code: str


class GameTerm(ApiModel):
    term_id: IdStr
    language_code: str
    text: str
    audio_ref: Optional[str] = None
    hints: List[GameHint] = []


class GameConcept(ApiModel):
    concept_id: IdStr
    image_url: Optional[str] = None
    terms: List[GameTerm] = []


class GameDatasetInfo(ApiModel):
    dataset_id: IdStr
    name: str
    source_language_code: str
    target_language_code: str
    owner_user_id: IdStr
    is_official: bool = False
    recommended_grade: Optional[int] = None


class GameSession(ApiModel):
    dataset_info: GameDatasetInfo
    concepts: List[GameConcept]


class GameLogCreate(ApiModel):
    term_id: int
    dataset_id: int
    was_correct: bool
    attempts: int = Field(..., ge=1)
    source: str = "game"


class GameLogCreated(ApiModel):
    log_id: IdStr
