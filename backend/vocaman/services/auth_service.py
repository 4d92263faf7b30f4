"""
认证服务：邮箱注册登录、Google 登录、令牌刷新与注销
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from vocaman.core import security
from vocaman.core.exceptions import Conflict, Unauthenticated
from vocaman.crud.crud_user import user as crud_user
from vocaman.db.database import transaction
from vocaman.models.user import User
from vocaman.schemas.auth import AuthUser, RegisterRequest, TokenPair
from vocaman.services.google_identity import GoogleIdentityVerifier
from vocaman.services.token_blocklist import TokenBlocklist

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        db: Session,
        token_blocklist: Optional[TokenBlocklist] = None,
        google_verifier: Optional[GoogleIdentityVerifier] = None,
    ):
        self.db = db
        self.token_blocklist = token_blocklist
        self.google_verifier = google_verifier

    def register(self, request: RegisterRequest) -> int:
        email = request.email.lower()
        with transaction(self.db):
            if crud_user.get_by_email(self.db, email=email) is not None:
                raise Conflict("Email is already registered")
            new_user = crud_user.create(
                self.db,
                obj_in={
                    "email": email,
                    "password_hash": security.hash_password(request.password),
                    "nickname": request.nickname,
                    "role": request.role,
                },
            )
            user_id = new_user.id
        logger.info(f"Registered user {user_id} with role '{request.role}'")
        return user_id

    def login(self, *, email: str, password: str) -> TokenPair:
        db_user = crud_user.get_by_email(self.db, email=email.lower())
        if db_user is None or not security.verify_password(password, db_user.password_hash):
            raise Unauthenticated("Invalid email or password")
        logger.info(f"User {db_user.id} logged in")
        return self._issue_tokens(db_user)

    def google_login(self, id_token: str) -> TokenPair:
        """
        校验 Google ID Token；邮箱必须已由 Google 验证。
        已有同邮箱账户时绑定 google_id，否则创建新的学生账户。
        """
        identity = self.google_verifier.verify(id_token)
        if not identity.email_verified:
            # 未验证的邮箱不能用来创建或绑定账户
            logger.warning(f"Rejected Google login for unverified email {identity.email}")
            raise Unauthenticated("Google account email is not verified")
        email = identity.email.lower()

        with transaction(self.db):
            db_user = crud_user.get_by_google_id_or_email(self.db, google_id=identity.google_id, email=email)
            if db_user is None:
                db_user = crud_user.create(
                    self.db,
                    obj_in={
                        "email": email,
                        "google_id": identity.google_id,
                        "nickname": identity.name or email.split("@")[0],
                        "role": "student",
                    },
                )
                logger.info(f"Created user {db_user.id} from Google login")
            elif db_user.google_id is None:
                crud_user.update(self.db, db_obj=db_user, obj_in={"google_id": identity.google_id})
                logger.info(f"Linked Google account to user {db_user.id}")
            tokens = self._issue_tokens(db_user)

        logger.info(f"User {tokens.user.user_id} logged in with Google")
        return tokens

    def refresh(self, refresh_token: str) -> str:
        """用刷新令牌换取新的访问令牌"""
        payload = security.decode_token(refresh_token, expected_type=security.REFRESH_TOKEN_TYPE)
        jti = payload.get("jti")
        if not jti or (self.token_blocklist is not None and self.token_blocklist.is_revoked(jti)):
            raise Unauthenticated("Refresh token has been revoked")

        db_user = crud_user.get(self.db, int(payload["sub"]))
        if db_user is None:
            raise Unauthenticated("User no longer exists")
        return security.create_access_token(
            user_id=db_user.id,
            email=db_user.email,
            role=db_user.role,
            nickname=db_user.nickname,
        )

    def logout(self, refresh_token: Optional[str]) -> None:
        """注销：若提供了刷新令牌，则将其 jti 加入黑名单直到过期"""
        if not refresh_token:
            return
        payload = security.decode_token(refresh_token, expected_type=security.REFRESH_TOKEN_TYPE)
        if self.token_blocklist is not None and payload.get("jti"):
            self.token_blocklist.revoke(payload["jti"], payload["exp"])
        logger.info(f"User {payload['sub']} logged out")

    @staticmethod
    def _issue_tokens(db_user: User) -> TokenPair:
        return TokenPair(
            access_token=security.create_access_token(
                user_id=db_user.id,
                email=db_user.email,
                role=db_user.role,
                nickname=db_user.nickname,
            ),
            refresh_token=security.create_refresh_token(user_id=db_user.id),
            user=AuthUser(
                user_id=db_user.id,
                email=db_user.email,
                nickname=db_user.nickname,
                role=db_user.role,
            ),
        )
