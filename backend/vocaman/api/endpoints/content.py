from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocaman.config.dependency_injection import get_db
from vocaman.core.exceptions import NotFound, TermNotFound
from vocaman.crud.crud_content import concept as crud_concept
from vocaman.crud.crud_content import term as crud_term
from vocaman.schemas.content import ConceptOut, HintOut, TermOut
from vocaman.schemas.response import StandardResponse

router = APIRouter()


@router.get("/concepts/{concept_id}", response_model=StandardResponse[ConceptOut])
def get_concept(concept_id: int, db: Session = Depends(get_db)):
    db_concept = crud_concept.get(db, concept_id)
    if db_concept is None:
        raise NotFound("Concept not found")
    return StandardResponse(
        data=ConceptOut(concept_id=db_concept.id, image_url=db_concept.image_url, created_by=db_concept.created_by)
    )


@router.get("/terms/{term_id}", response_model=StandardResponse[TermOut])
def get_term(term_id: int, db: Session = Depends(get_db)):
    """
    获取单词及其全部提示

    Args:
        term_id: 单词ID
        db: 数据库会话

    Returns:
        StandardResponse[TermOut]: 单词详情
    """
    db_term = crud_term.get(db, term_id)
    if db_term is None:
        raise TermNotFound()
    hints = crud_term.get_hints(db, term_id=term_id)
    return StandardResponse(
        data=TermOut(
            term_id=db_term.id,
            concept_id=db_term.concept_id,
            language_code=db_term.language_code,
            text=db_term.text,
            audio_ref=db_term.audio_ref,
            hints=[
                HintOut(
                    hint_id=h.id,
                    hint_type=h.hint_type,
                    hint_content=h.hint_content,
                    language_code=h.language_code,
                )
                for h in hints
            ],
        )
    )
