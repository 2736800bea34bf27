"""Firestoreクライアント"""
import os
from typing import Any, Callable, Optional, TypeVar

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ....shared.exceptions.errors import DuplicateError, StorageError, TripLogError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class FirestoreClient:
    """Firestore操作クライアント"""

    def __init__(self, project_id: str, database_id: str = "(default)") -> None:
        """
        Firestoreクライアントを初期化

        Args:
            project_id: GCPプロジェクトID
            database_id: データベースID（デフォルトは"(default)"）
        """
        self.project_id = project_id
        self.database_id = database_id

        # エミュレータモードの検出
        emulator_host = os.environ.get("FIRESTORE_EMULATOR_HOST")

        try:
            self.client = firestore.Client(
                project=project_id, database=database_id
            )

            if emulator_host:
                logger.info(
                    f"Firestore client initialized (EMULATOR MODE): "
                    f"host={emulator_host}, project={project_id}, database={database_id}"
                )
            else:
                logger.info(
                    f"Firestore client initialized: project={project_id}, database={database_id}"
                )
        except Exception as e:
            raise StorageError(f"Failed to initialize Firestore client: {e}") from e

    def get_collection(self, collection_path: str) -> firestore.CollectionReference:
        """
        コレクション参照を取得

        Args:
            collection_path: コレクションパス

        Returns:
            CollectionReference: コレクション参照
        """
        return self.client.collection(collection_path)

    def document(self, collection_path: str, document_id: str) -> firestore.DocumentReference:
        """ドキュメント参照を取得"""
        return self.get_collection(collection_path).document(document_id)

    def get_document(
        self, collection_path: str, document_id: str
    ) -> Optional[dict[str, Any]]:
        """
        ドキュメントを取得

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID

        Returns:
            Optional[dict[str, Any]]: ドキュメントデータ（存在しない場合はNone）
        """
        try:
            doc = self.document(collection_path, document_id).get()

            if doc.exists:
                return doc.to_dict()
            return None

        except Exception as e:
            raise StorageError(
                f"Failed to get document {document_id} from {collection_path}: {e}"
            ) from e

    def set_document(
        self,
        collection_path: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """
        ドキュメントを書き込み（存在する場合は上書き、merge=Trueなら部分更新）

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID
            data: 書き込む内容
            merge: 既存フィールドとマージするか
        """
        try:
            self.document(collection_path, document_id).set(data, merge=merge)
            logger.debug(f"Document {document_id} written to {collection_path}")

        except Exception as e:
            raise StorageError(
                f"Failed to set document {document_id} in {collection_path}: {e}"
            ) from e

    def create_document(
        self, collection_path: str, document_id: str, data: dict[str, Any]
    ) -> None:
        """
        ドキュメントを新規作成（既に存在する場合は失敗）

        存在確認と作成がサーバー側で一括して行われるため、
        同時リクエストでも作成に成功するのは1件だけになる。

        Raises:
            DuplicateError: 同じIDのドキュメントが既に存在する場合
            StorageError: 書き込みに失敗した場合
        """
        try:
            self.document(collection_path, document_id).create(data)
            logger.debug(f"Document {document_id} created in {collection_path}")

        except google_exceptions.AlreadyExists as e:
            raise DuplicateError(
                f"Document {document_id} already exists in {collection_path}"
            ) from e
        except Exception as e:
            raise StorageError(
                f"Failed to create document {document_id} in {collection_path}: {e}"
            ) from e

    def query_documents(
        self,
        collection_path: str,
        filters: Optional[list[tuple[str, str, Any]]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        条件に一致するドキュメントを取得

        複合インデックスを増やさないよう、並び替えは呼び出し側で行う。

        Args:
            collection_path: コレクションパス
            filters: フィルタ条件のリスト [(field, operator, value), ...]
            limit: 取得件数の上限

        Returns:
            list[dict[str, Any]]: ドキュメントのリスト

        Example:
            >>> client.query_documents(
            ...     "trips",
            ...     filters=[("user_id", "==", "driver@example.com"), ("start_date", ">=", "2024-07-01")],
            ... )
        """
        try:
            query = self.get_collection(collection_path)

            if filters:
                for field, operator, value in filters:
                    query = query.where(filter=FieldFilter(field, operator, value))

            if limit:
                query = query.limit(limit)

            docs = query.stream()
            return [doc.to_dict() for doc in docs if doc.exists]

        except Exception as e:
            raise StorageError(
                f"Failed to query documents from {collection_path}: {e}"
            ) from e

    def delete_document(self, collection_path: str, document_id: str) -> None:
        """
        ドキュメントを削除

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID
        """
        try:
            self.document(collection_path, document_id).delete()
            logger.info(f"Document {document_id} deleted from {collection_path}")

        except Exception as e:
            raise StorageError(
                f"Failed to delete document {document_id} from {collection_path}: {e}"
            ) from e

    def update_document(
        self, collection_path: str, document_id: str, updates: dict[str, Any]
    ) -> None:
        """
        ドキュメントを更新

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID
            updates: 更新内容
        """
        try:
            self.document(collection_path, document_id).update(updates)
            logger.info(
                f"Document {document_id} updated in {collection_path}: {list(updates)}"
            )

        except Exception as e:
            raise StorageError(
                f"Failed to update document {document_id} in {collection_path}: {e}"
            ) from e

    def run_transaction(self, callback: Callable[[firestore.Transaction], T]) -> T:
        """
        コールバックをトランザクション内で実行

        読み取ったドキュメントが他のリクエストに更新された場合、
        Firestoreがコールバックを再実行する。

        Args:
            callback: トランザクションを受け取る関数（読み取りを書き込みより先に行うこと）

        Returns:
            コールバックの戻り値

        Raises:
            StorageError: トランザクションが失敗した場合
        """
        transaction = self.client.transaction()

        @firestore.transactional
        def _run(tx: firestore.Transaction) -> T:
            return callback(tx)

        try:
            return _run(transaction)
        except TripLogError:
            raise
        except Exception as e:
            raise StorageError(f"Transaction failed: {e}") from e
