from typing import Literal, Optional

from pydantic import EmailStr, Field

from vocaman.schemas.base import ApiModel, IdStr


class RegisterRequest(ApiModel):
    """注册请求，role 只能选择 student 或 parent"""
    email: EmailStr
    password: str = Field(..., min_length=1)
    nickname: str = Field(..., min_length=1, max_length=100)
    role: Literal["student", "parent"] = "student"


class RegisterResponse(ApiModel):
    user_id: IdStr


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(ApiModel):
    id_token: str = Field(..., min_length=1)


class RefreshRequest(ApiModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(ApiModel):
    refresh_token: Optional[str] = None


class AuthUser(ApiModel):
    """令牌中携带的用户信息"""
    user_id: IdStr
    email: str
    nickname: str
    role: str


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    user: AuthUser


class AccessTokenResponse(ApiModel):
    access_token: str
