"""アカウント登録・ログインサービス"""

import re
from typing import Optional

from ....shared.exceptions.errors import (
    AuthenticationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from ....shared.logging.config import get_logger
from ...storage.repositories.user_data_repository import UserDataRepository
from ...storage.repositories.user_repository import UserRepository
from ..domain.models import TokenClaims, User
from .password_hasher import PasswordHasher
from .token_service import TokenService

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 50

INVALID_CREDENTIALS = "Invalid email or password. Please check your credentials."


def is_valid_email(email: str) -> bool:
    """メールアドレスの形式チェック"""
    return bool(EMAIL_PATTERN.match(email))


def normalize_email(email: str) -> str:
    """ユーザーIDとして使う形式（小文字、前後空白なし）"""
    return email.lower().strip()


class AuthService:
    """アカウント登録、ログイン、トークン検証"""

    def __init__(
        self,
        user_repository: UserRepository,
        user_data_repository: UserDataRepository,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ) -> None:
        self.user_repository = user_repository
        self.user_data_repository = user_data_repository
        self.password_hasher = password_hasher
        self.token_service = token_service

        logger.info("AuthService initialized")

    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        full_name: Optional[str],
    ) -> User:
        """
        アカウントを登録

        Raises:
            ValidationError: 入力が不正、またはメールアドレスが登録済みの場合
        """
        if not email or not password or not full_name:
            raise ValidationError("Email, password, and full name are required")

        if not email.strip():
            raise ValidationError("Email cannot be empty")

        if not is_valid_email(email.strip()):
            raise ValidationError(
                "Please enter a valid email address (e.g., user@example.com)"
            )

        if not full_name.strip():
            raise ValidationError("Full name cannot be empty")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 6 characters long")

        if len(password) > MAX_PASSWORD_LENGTH:
            raise ValidationError("Password must be less than 50 characters")

        email_key = normalize_email(email)

        if self.user_repository.get_by_email(email_key):
            raise ValidationError("An account with this email already exists")

        user = User(
            email=email_key,
            password_hash=self.password_hasher.hash(password),
            full_name=full_name.strip(),
        )

        try:
            self.user_repository.create(user)
        except DuplicateError as e:
            raise ValidationError("An account with this email already exists") from e

        self.user_data_repository.get_or_create(email_key)

        logger.info(f"User registered: {email_key}")
        return user

    def login(self, email: Optional[str], password: Optional[str]) -> tuple[str, User]:
        """
        ログインしてアクセストークンを発行

        Returns:
            tuple[str, User]: (トークン, ユーザー)

        Raises:
            ValidationError: 入力が不正な場合
            AuthenticationError: メールアドレスまたはパスワードが一致しない場合
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        if not email.strip():
            raise ValidationError("Email cannot be empty")

        if not is_valid_email(email.strip()):
            raise ValidationError("Please enter a valid email address")

        email_key = normalize_email(email)
        user = self.user_repository.get_by_email(email_key)

        if user is None or not self.password_hasher.verify(password, user.password_hash):
            logger.info(f"Failed login attempt: {email_key}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = self.token_service.issue(user)

        logger.info(f"User logged in: {email_key}")
        return token, user

    def authenticate(self, token: Optional[str]) -> TokenClaims:
        """
        トークンを検証してユーザーを特定

        Raises:
            AuthenticationError: トークンがない場合
            InvalidTokenError: トークンが無効な場合
        """
        if not token:
            raise AuthenticationError("Access token required")

        return self.token_service.verify(token)

    def get_user(self, user_id: str) -> User:
        """
        ユーザーを取得

        Raises:
            NotFoundError: ユーザーが存在しない場合
        """
        user = self.user_repository.get_by_email(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
