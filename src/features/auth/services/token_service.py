"""アクセストークン（JWT）の発行と検証"""

from datetime import datetime
from typing import Optional

import jwt

from ....shared.exceptions.errors import InvalidTokenError
from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import format_duration, now_local, seconds_until_next_hour
from ..domain.models import TokenClaims, User

logger = get_logger(__name__)


class TokenService:
    """
    JWTの発行と検証

    トークンは毎晩決まった時刻（既定は午前1時）に一斉に失効する。
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expiry_hour: int = 1,
        timezone: str = "Australia/Sydney",
    ) -> None:
        """
        Args:
            secret: 署名用シークレット
            algorithm: 署名アルゴリズム
            expiry_hour: 失効時刻（ローカル時間の時）
            timezone: 失効時刻の基準タイムゾーン
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expiry_hour = expiry_hour
        self.timezone = timezone

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> int:
        """次の失効時刻までの秒数"""
        now = now or now_local(self.timezone)
        return seconds_until_next_hour(self.expiry_hour, now)

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """
        ユーザーのアクセストークンを発行

        Args:
            user: ユーザー
            now: 発行時刻（テスト用、省略時は現在時刻）

        Returns:
            str: エンコード済みJWT
        """
        now = now or now_local(self.timezone)
        expires_in = self.seconds_until_expiry(now)
        issued_at = int(now.timestamp())

        payload = {
            "sub": user.email,
            "name": user.full_name,
            "iat": issued_at,
            "exp": issued_at + expires_in,
        }

        logger.info(f"Token for {user.email} will expire in {format_duration(expires_in)}")

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        トークンを検証

        Raises:
            InvalidTokenError: 署名不正、期限切れ、必須クレームなしの場合
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        return TokenClaims(user_id=payload["sub"], username=payload.get("name", ""))
