"""認証（パスワードハッシュ、トークン、登録・ログイン）のテスト"""

from datetime import datetime

import jwt
import pytest
import pytz

from src.features.auth.domain.models import User
from src.features.auth.services.auth_service import AuthService, is_valid_email
from src.features.auth.services.password_hasher import PasswordHasher
from src.features.auth.services.token_service import TokenService
from src.shared.exceptions.errors import (
    AuthenticationError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)

USER = User(email="driver@example.com", password_hash="unused", full_name="Jane Driver")


class TestPasswordHasher:
    """PasswordHasherのテスト"""

    def test_hash_and_verify(self) -> None:
        hasher = PasswordHasher(rounds=4)
        password_hash = hasher.hash("secret123")

        assert password_hash != "secret123"
        assert hasher.verify("secret123", password_hash)
        assert not hasher.verify("wrong-password", password_hash)

    def test_verify_with_malformed_hash(self) -> None:
        """壊れたハッシュは一致しない扱い"""
        assert not PasswordHasher(rounds=4).verify("secret123", "not-a-bcrypt-hash")

    def test_long_password(self) -> None:
        """72バイトを超えるパスワードも扱える"""
        hasher = PasswordHasher(rounds=4)
        password = "x" * 100

        assert hasher.verify(password, hasher.hash(password))


class TestTokenService:
    """TokenServiceのテスト"""

    def test_issue_and_verify(self, token_service: TokenService) -> None:
        claims = token_service.verify(token_service.issue(USER))

        assert claims.user_id == "driver@example.com"
        assert claims.username == "Jane Driver"

    def test_expires_at_next_1am_local(self, token_service: TokenService) -> None:
        """トークンは次のシドニー時間1:00に失効する"""
        now = pytz.timezone("Australia/Sydney").localize(datetime(2024, 7, 1, 23, 30))
        token = token_service.issue(USER, now=now)

        payload = jwt.decode(
            token, "test-secret", algorithms=["HS256"], options={"verify_exp": False}
        )
        assert payload["exp"] - payload["iat"] == 90 * 60

    def test_expired_token(self, token_service: TokenService) -> None:
        now = pytz.timezone("Australia/Sydney").localize(datetime(2020, 1, 1, 12, 0))
        token = token_service.issue(USER, now=now)

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_wrong_secret(self, token_service: TokenService) -> None:
        token = TokenService(secret="other-secret").issue(USER)

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_missing_subject(self, token_service: TokenService) -> None:
        token = jwt.encode({"exp": 4102444800}, "test-secret", algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_garbage_token(self, token_service: TokenService) -> None:
        with pytest.raises(InvalidTokenError):
            token_service.verify("not.a.token")


@pytest.mark.parametrize(
    "email,expected",
    [
        ("user@example.com", True),
        ("first.last+tag@sub.example.com.au", True),
        ("user@example", False),
        ("user example.com", False),
        ("@example.com", False),
    ],
)
def test_is_valid_email(email: str, expected: bool) -> None:
    assert is_valid_email(email) is expected


class TestAuthService:
    """AuthServiceのテスト"""

    def test_register_normalizes_email(self, auth_service: AuthService, firestore_client) -> None:
        user = auth_service.register("  Driver@Example.com ", "secret123", " Jane Driver ")

        assert user.email == "driver@example.com"
        assert user.full_name == "Jane Driver"
        assert "driver@example.com" in firestore_client.collections["users"]
        # オドメーターは0で初期化される
        assert firestore_client.collections["user_data"]["driver@example.com"][
            "current_odometer"
        ] == 0.0

    @pytest.mark.parametrize(
        "email,password,full_name,message",
        [
            (None, "secret123", "Jane", "Email, password, and full name are required"),
            ("a@b.com", "", "Jane", "Email, password, and full name are required"),
            ("   ", "secret123", "Jane", "Email cannot be empty"),
            (
                "not-an-email",
                "secret123",
                "Jane",
                "Please enter a valid email address (e.g., user@example.com)",
            ),
            ("a@b.com", "secret123", "   ", "Full name cannot be empty"),
            ("a@b.com", "12345", "Jane", "Password must be at least 6 characters long"),
            ("a@b.com", "x" * 51, "Jane", "Password must be less than 50 characters"),
        ],
    )
    def test_register_validation(
        self, auth_service: AuthService, email, password, full_name, message
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            auth_service.register(email, password, full_name)

        assert str(exc_info.value) == message

    def test_register_duplicate(self, auth_service: AuthService) -> None:
        auth_service.register("driver@example.com", "secret123", "Jane")

        with pytest.raises(ValidationError, match="already exists"):
            auth_service.register("DRIVER@example.com", "secret456", "Janet")

    def test_login(self, auth_service: AuthService) -> None:
        auth_service.register("driver@example.com", "secret123", "Jane")

        token, user = auth_service.login("Driver@example.com", "secret123")

        assert user.email == "driver@example.com"
        assert auth_service.authenticate(token).user_id == "driver@example.com"

    @pytest.mark.parametrize(
        "email,password",
        [("driver@example.com", "wrong-password"), ("nobody@example.com", "secret123")],
    )
    def test_login_invalid_credentials(self, auth_service: AuthService, email, password) -> None:
        """ユーザーが存在しない場合もパスワード違いと同じメッセージ"""
        auth_service.register("driver@example.com", "secret123", "Jane")

        with pytest.raises(AuthenticationError) as exc_info:
            auth_service.login(email, password)

        assert not isinstance(exc_info.value, InvalidTokenError)
        assert "Invalid email or password" in str(exc_info.value)

    def test_login_requires_fields(self, auth_service: AuthService) -> None:
        with pytest.raises(ValidationError, match="Email and password are required"):
            auth_service.login("driver@example.com", None)

    def test_authenticate_without_token(self, auth_service: AuthService) -> None:
        with pytest.raises(AuthenticationError, match="Access token required"):
            auth_service.authenticate(None)

    def test_get_user_not_found(self, auth_service: AuthService) -> None:
        with pytest.raises(NotFoundError):
            auth_service.get_user("nobody@example.com")
