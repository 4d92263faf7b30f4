"""
密码哈希与 JWT 令牌工具

访问令牌携带 sub/email/role/nickname，刷新令牌只携带 sub 和 jti，
两者通过 type 声明区分，避免互相冒用。
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from vocaman.core.config import settings
from vocaman.core.exceptions import Unauthenticated, ValidationError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# bcrypt 只处理前 72 个字节
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > _BCRYPT_MAX_BYTES:
        raise ValidationError("Password must be at most 72 bytes long")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    encoded = password.encode("utf-8")
    if len(encoded) > _BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def create_access_token(*, user_id: int, email: str, role: str, nickname: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "nickname": nickname,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(*, user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, *, expected_type: str) -> Dict[str, Any]:
    """
    校验签名、过期时间和令牌类型。

    Raises:
        Unauthenticated: 令牌过期、签名无效或类型不符
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise Unauthenticated("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise Unauthenticated("Invalid token") from e

    if payload.get("type") != expected_type:
        raise Unauthenticated("Invalid token type")
    if not str(payload.get("sub", "")).isdigit():
        raise Unauthenticated("Invalid token subject")
    return payload
