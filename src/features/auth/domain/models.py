"""認証機能のドメインモデル"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class User:
    """ユーザー（メールアドレスをIDとして使用）"""

    email: str  # 小文字化・前後空白除去済み
    password_hash: str  # bcryptハッシュ
    full_name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def user_id(self) -> str:
        return self.email

    def to_firestore_dict(self) -> dict[str, Any]:
        """Firestore保存用の辞書に変換"""
        return {
            "email": self.email,
            "password_hash": self.password_hash,
            "full_name": self.full_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> "User":
        """Firestoreのデータからユーザーを生成"""
        return cls(
            email=data["email"],
            password_hash=data["password_hash"],
            full_name=data.get("full_name", ""),
            created_at=data.get("created_at") or datetime.now(timezone.utc),
        )

    def to_api_dict(self) -> dict[str, str]:
        """APIレスポンス用（パスワードハッシュは含めない）"""
        return {"email": self.email, "fullName": self.full_name}


@dataclass(frozen=True)
class TokenClaims:
    """検証済みトークンの内容"""

    user_id: str
    username: str
