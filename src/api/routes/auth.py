"""認証エンドポイント"""
from typing import Any

from fastapi import APIRouter, Depends, Response

from ...features.auth.domain.models import TokenClaims
from ...infrastructure.container import AppContainer
from ..dependencies import get_container, get_current_user
from ..schemas import LoginRequest, RegisterRequest

router = APIRouter(prefix="/api")


@router.post("/register")
def register(
    body: RegisterRequest, container: AppContainer = Depends(get_container)
) -> dict[str, Any]:
    """アカウント登録"""
    container.auth_service.register(body.email, body.password, body.full_name)
    return {"success": True, "message": "Account created successfully! Please sign in."}


@router.post("/login")
def login(
    body: LoginRequest,
    response: Response,
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    """ログイン（トークンをレスポンスとCookieの両方で返す）"""
    token, user = container.auth_service.login(body.email, body.password)

    settings = container.settings
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"success": True, "token": token, "user": user.to_api_dict()}


@router.post("/logout")
def logout(
    response: Response, container: AppContainer = Depends(get_container)
) -> dict[str, Any]:
    """ログアウト"""
    response.delete_cookie(container.settings.session_cookie_name)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/user")
def current_user(
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, str]:
    """ログイン中のユーザー情報"""
    return container.auth_service.get_user(claims.user_id).to_api_dict()
