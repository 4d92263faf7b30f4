from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from vocaman.api.deps import get_current_user
from vocaman.config.dependency_injection import get_db, get_relation_service
from vocaman.core.exceptions import NotFound
from vocaman.crud.crud_game import user_stats as crud_user_stats
from vocaman.crud.crud_user import user as crud_user
from vocaman.db.database import transaction
from vocaman.schemas.auth import AuthUser
from vocaman.schemas.response import StandardResponse
from vocaman.schemas.user import (
    ProfileUpdate,
    ProfileUpdateResponse,
    RelationDecision,
    RelationOverview,
    RelationRequestCreate,
    RelationRequestResponse,
    UserProfile,
    UserSettings,
    UserStatsResponse,
)
from vocaman.services.relation_service import RelationService

router = APIRouter()


def _load_user(db: Session, user_id: int):
    db_user = crud_user.get(db, user_id)
    if db_user is None:
        raise NotFound("User not found")
    return db_user


@router.get("/me", response_model=StandardResponse[UserProfile])
def get_my_profile(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    db_user = _load_user(db, current_user.user_id)
    return StandardResponse(
        data=UserProfile(
            user_id=db_user.id,
            email=db_user.email,
            nickname=db_user.nickname,
            role=db_user.role,
            mileage=db_user.mileage,
        )
    )


@router.put("/me", response_model=StandardResponse[ProfileUpdateResponse])
def update_my_profile(
    profile_in: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        db_user = _load_user(db, current_user.user_id)
        crud_user.update(db, db_obj=db_user, obj_in={"nickname": profile_in.nickname})
    return StandardResponse(message="Profile updated", data=ProfileUpdateResponse(nickname=profile_in.nickname))


@router.get("/me/settings", response_model=StandardResponse[UserSettings])
def get_my_settings(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    db_user = _load_user(db, current_user.user_id)
    return StandardResponse(data=db_user.settings or {})


@router.put("/me/settings", response_model=StandardResponse[UserSettings])
def replace_my_settings(
    settings_in: UserSettings = Body(...),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """整体覆盖当前用户的客户端设置"""
    with transaction(db):
        db_user = _load_user(db, current_user.user_id)
        crud_user.replace_settings(db, db_obj=db_user, settings=settings_in)
    return StandardResponse(message="Settings saved", data=settings_in)


@router.post(
    "/me/relations/request",
    response_model=StandardResponse[RelationRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
def request_relation(
    request_in: RelationRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    relation_service: RelationService = Depends(get_relation_service),
):
    relation_id = relation_service.request_relation(
        parent_id=current_user.user_id,
        parent_nickname=current_user.nickname,
        child_email=request_in.child_email,
    )
    return StandardResponse(code=201, message="Relation request sent", data=RelationRequestResponse(relation_id=relation_id))


@router.get("/me/relations", response_model=StandardResponse[RelationOverview])
def list_my_relations(
    current_user: AuthUser = Depends(get_current_user),
    relation_service: RelationService = Depends(get_relation_service),
):
    return StandardResponse(data=relation_service.list_relations(current_user.user_id))


@router.put("/me/relations/{relation_id}", response_model=StandardResponse)
def handle_relation_request(
    relation_id: int,
    decision: RelationDecision,
    current_user: AuthUser = Depends(get_current_user),
    relation_service: RelationService = Depends(get_relation_service),
):
    relation_service.handle_request(
        child_id=current_user.user_id,
        child_nickname=current_user.nickname,
        relation_id=relation_id,
        status=decision.status,
    )
    return StandardResponse(message=f"Relation request {decision.status}")


@router.get("/me/stats", response_model=StandardResponse[UserStatsResponse])
def get_my_stats(
    lang_pair: str = Query(..., min_length=1),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """某个语言对（如 ko-en）下的胜负与连胜统计，尚无记录时返回全零"""
    stats = crud_user_stats.get_for_pair(db, user_id=current_user.user_id, language_pair_code=lang_pair)
    if stats is None:
        return StandardResponse(data=UserStatsResponse(language_pair_code=lang_pair))
    return StandardResponse(
        data=UserStatsResponse(
            language_pair_code=lang_pair,
            wins=stats.wins,
            losses=stats.losses,
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
        )
    )
