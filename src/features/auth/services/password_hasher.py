"""パスワードハッシュ（bcrypt）"""

import bcrypt

# bcryptが扱えるのは先頭72バイトまで
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcryptによるパスワードのハッシュ化と照合"""

    def __init__(self, rounds: int = 10) -> None:
        """
        Args:
            rounds: コストファクター
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """パスワードをハッシュ化"""
        hashed = bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """パスワードがハッシュと一致するか（ハッシュが壊れている場合はFalse）"""
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
