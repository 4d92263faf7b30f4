from fastapi import APIRouter, Depends, status

from vocaman.config.dependency_injection import get_auth_service
from vocaman.schemas.auth import (
    AccessTokenResponse,
    GoogleLoginRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPair,
)
from vocaman.schemas.response import StandardResponse
from vocaman.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=StandardResponse[RegisterResponse], status_code=status.HTTP_201_CREATED)
def register(register_in: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    邮箱注册

    Args:
        register_in: 邮箱、密码、昵称和角色（student 或 parent）
        auth_service: 认证服务

    Returns:
        StandardResponse[RegisterResponse]: 新用户ID
    """
    user_id = auth_service.register(register_in)
    return StandardResponse(code=201, message="User registered successfully", data=RegisterResponse(user_id=user_id))


@router.post("/login", response_model=StandardResponse[TokenPair])
def login(login_in: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    tokens = auth_service.login(email=login_in.email, password=login_in.password)
    return StandardResponse(data=tokens)


@router.post("/google/login", response_model=StandardResponse[TokenPair])
def google_login(google_in: GoogleLoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    tokens = auth_service.google_login(google_in.id_token)
    return StandardResponse(data=tokens)


@router.post("/refresh", response_model=StandardResponse[AccessTokenResponse])
def refresh(refresh_in: RefreshRequest, auth_service: AuthService = Depends(get_auth_service)):
    access_token = auth_service.refresh(refresh_in.refresh_token)
    return StandardResponse(data=AccessTokenResponse(access_token=access_token))


@router.post("/logout", response_model=StandardResponse)
def logout(logout_in: LogoutRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.logout(logout_in.refresh_token)
    return StandardResponse(message="Logged out")
