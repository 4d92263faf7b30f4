from fastapi import APIRouter, Depends, Query, status

from vocaman.api.deps import get_current_user
from vocaman.config.dependency_injection import get_game_service
from vocaman.schemas.auth import AuthUser
from vocaman.schemas.game import GameLogCreate, GameLogCreated, GameSession
from vocaman.schemas.response import StandardResponse
from vocaman.services.game_service import GameService

router = APIRouter()


@router.get("/session", response_model=StandardResponse[GameSession])
def get_game_session(
    dataset_id: int = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    game_service: GameService = Depends(get_game_service),
):
    return StandardResponse(data=game_service.compose_session(dataset_id))


@router.get("/session/default", response_model=StandardResponse[GameSession])
def get_default_game_session(
    grade: int = Query(..., ge=1),
    current_user: AuthUser = Depends(get_current_user),
    game_service: GameService = Depends(get_game_service),
):
    return StandardResponse(data=game_service.compose_default_session(grade))


@router.post("/logs", response_model=StandardResponse[GameLogCreated], status_code=status.HTTP_201_CREATED)
def create_game_log(
    log_in: GameLogCreate,
    current_user: AuthUser = Depends(get_current_user),
    game_service: GameService = Depends(get_game_service),
):
    log_id = game_service.log_result(user_id=current_user.user_id, log_in=log_in)
    return StandardResponse(code=201, message="Game log saved", data=GameLogCreated(log_id=log_id))
