"""FastAPIの依存関係"""
from typing import Optional

from fastapi import Depends, Request

from ..features.auth.domain.models import TokenClaims
from ..infrastructure.container import AppContainer


def get_container(request: Request) -> AppContainer:
    """起動時に組み立てたサービス群を取得"""
    return request.app.state.container


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Cookie、なければAuthorization: Bearer ヘッダーからトークンを取り出す"""
    token = request.cookies.get(cookie_name)
    if token:
        return token

    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return None


def get_current_user(
    request: Request, container: AppContainer = Depends(get_container)
) -> TokenClaims:
    """
    リクエストの認証ユーザーを取得

    Raises:
        AuthenticationError: トークンがない場合（401）
        InvalidTokenError: トークンが無効な場合（403）
    """
    token = extract_token(request, container.settings.session_cookie_name)
    return container.auth_service.authenticate(token)
