from fastapi import APIRouter
from vocaman.api.endpoints import auth, users, datasets, content, game, homework, notifications

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(datasets.router, prefix="/datasets", tags=["datasets"])
api_router.include_router(content.router, tags=["content"])
api_router.include_router(game.router, prefix="/game", tags=["game"])
api_router.include_router(homework.router, prefix="/homework", tags=["homework"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
