from typing import List, Optional

from vocaman.schemas.base import ApiModel, IdStr


class ConceptOut(ApiModel):
    concept_id: IdStr
    image_url: Optional[str] = None
    created_by: Optional[IdStr] = None


class HintOut(ApiModel):
    hint_id: IdStr
    hint_type: str
    hint_content: str
    language_code: str


class TermOut(ApiModel):
    term_id: IdStr
    concept_id: IdStr
    language_code: str
    text: str
    audio_ref: Optional[str] = None
    hints: List[HintOut] = []
