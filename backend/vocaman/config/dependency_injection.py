import redis
from fastapi import Depends
from sqlalchemy.orm import Session

from vocaman.core.config import settings
from vocaman.db.database import get_db
from vocaman.services.auth_service import AuthService
from vocaman.services.dataset_service import DatasetService
from vocaman.services.game_service import GameService
from vocaman.services.google_identity import GoogleIdentityVerifier
from vocaman.services.homework_service import HomeworkService
from vocaman.services.notification_service import NotificationDispatcher
from vocaman.services.relation_service import RelationService
from vocaman.services.token_blocklist import TokenBlocklist


_redis_client_instance = None

def get_redis_client() -> redis.Redis:
    """
    获取 Redis 客户端单例实例
    """
    global _redis_client_instance
    if _redis_client_instance is None:
        _redis_client_instance = redis.from_url(
            settings.REDIS_URL,
            decode_responses=False,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
    return _redis_client_instance


def get_token_blocklist() -> TokenBlocklist:
    return TokenBlocklist(redis_client=get_redis_client())


def get_google_verifier() -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier(
        client_id=settings.GOOGLE_CLIENT_ID,
        timeout=settings.GOOGLE_REQUEST_TIMEOUT,
    )


_notification_dispatcher_instance = None

def get_notification_dispatcher() -> NotificationDispatcher:
    """
    获取通知分发器单例实例
    """
    global _notification_dispatcher_instance
    if _notification_dispatcher_instance is None:
        _notification_dispatcher_instance = NotificationDispatcher()
    return _notification_dispatcher_instance


# --- 请求级服务依赖注入 ---

def get_auth_service(
    db: Session = Depends(get_db),
    token_blocklist: TokenBlocklist = Depends(get_token_blocklist),
    google_verifier: GoogleIdentityVerifier = Depends(get_google_verifier),
) -> AuthService:
    return AuthService(db, token_blocklist=token_blocklist, google_verifier=google_verifier)


def get_homework_service(
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> HomeworkService:
    return HomeworkService(db, notifier=notifier)


def get_relation_service(
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> RelationService:
    return RelationService(db, notifier=notifier)


def get_dataset_service(db: Session = Depends(get_db)) -> DatasetService:
    return DatasetService(db)


def get_game_service(db: Session = Depends(get_db)) -> GameService:
    return GameService(db)
