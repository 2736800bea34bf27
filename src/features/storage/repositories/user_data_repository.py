"""ユーザー車両データ（オドメーター）リポジトリ"""

from ....shared.exceptions.errors import DuplicateError
from ....shared.logging.config import get_logger
from ...trips.domain.models import UserData
from ..clients.firestore_client import FirestoreClient

logger = get_logger(__name__)


class UserDataRepository:
    """オドメーターなどユーザーごとの車両データのリポジトリ"""

    COLLECTION_NAME = "user_data"

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """
        Args:
            firestore_client: Firestoreクライアント
        """
        self.client = firestore_client
        logger.info("UserDataRepository initialized")

    def get_or_create(self, user_id: str) -> UserData:
        """
        ユーザーデータを取得（存在しない場合はオドメーター0で作成）

        Args:
            user_id: ユーザーID

        Returns:
            UserData: ユーザーデータ
        """
        doc_data = self.client.get_document(self.COLLECTION_NAME, user_id)
        if doc_data:
            return UserData.from_firestore_dict(doc_data)

        user_data = UserData(user_id=user_id)
        try:
            self.client.create_document(
                self.COLLECTION_NAME, user_id, user_data.to_firestore_dict()
            )
            logger.info(f"User data initialized: {user_id}")
        except DuplicateError:
            # 別リクエストが先に作成した
            doc_data = self.client.get_document(self.COLLECTION_NAME, user_id)
            if doc_data:
                return UserData.from_firestore_dict(doc_data)

        return user_data

    def set_odometer(self, user_id: str, odometer: float) -> UserData:
        """
        現在のオドメーターを更新

        Args:
            user_id: ユーザーID
            odometer: オドメーター値

        Returns:
            UserData: 更新後のユーザーデータ
        """
        user_data = UserData(user_id=user_id, current_odometer=odometer)
        self.client.set_document(
            self.COLLECTION_NAME, user_id, user_data.to_firestore_dict(), merge=True
        )
        logger.info(f"Odometer updated: {user_id} -> {odometer}")

        return user_data
