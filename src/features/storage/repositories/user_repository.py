"""ユーザーリポジトリ"""
from typing import Optional

from ....shared.exceptions.errors import DuplicateError, StorageError
from ....shared.logging.config import get_logger
from ...auth.domain.models import User
from ..clients.firestore_client import FirestoreClient

logger = get_logger(__name__)


class UserRepository:
    """ユーザーアカウントのリポジトリ（ドキュメントID = メールアドレス）"""

    COLLECTION_NAME = "users"

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """
        Args:
            firestore_client: Firestoreクライアント
        """
        self.client = firestore_client
        logger.info("UserRepository initialized")

    def create(self, user: User) -> None:
        """
        ユーザーを新規作成

        Raises:
            DuplicateError: 同じメールアドレスのユーザーが既に存在する場合
            StorageError: 保存に失敗した場合
        """
        try:
            self.client.create_document(
                self.COLLECTION_NAME, user.email, user.to_firestore_dict()
            )
            logger.info(f"User created: {user.email}")

        except (DuplicateError, StorageError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to create user {user.email}: {e}") from e

    def get_by_email(self, email: str) -> Optional[User]:
        """
        メールアドレスでユーザーを取得

        Args:
            email: 正規化済みのメールアドレス

        Returns:
            Optional[User]: ユーザー（存在しない場合はNone）
        """
        doc_data = self.client.get_document(self.COLLECTION_NAME, email)

        if doc_data:
            return User.from_firestore_dict(doc_data)
        return None
