from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vocaman.core.exceptions import Forbidden, Unauthenticated
from vocaman.core.security import ACCESS_TOKEN_TYPE, decode_token
from vocaman.schemas.auth import AuthUser

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthUser:
    """
    从 Authorization: Bearer <token> 中解析当前用户。

    Raises:
        Unauthenticated: 缺少令牌、令牌无效/过期或不是访问令牌
    """
    if credentials is None:
        raise Unauthenticated("Authorization header is missing")
    payload = decode_token(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
    return AuthUser(
        user_id=int(payload["sub"]),
        email=payload.get("email", ""),
        nickname=payload.get("nickname", ""),
        role=payload.get("role", ""),
    )


def require_role(*roles: str) -> Callable[..., AuthUser]:
    """生成只允许指定角色访问的依赖项，其他角色返回 403"""

    def checker(current_user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if current_user.role not in roles:
            raise Forbidden(f"This endpoint is only available to {' or '.join(roles)} accounts")
        return current_user

    return checker
