"""完了トリップリポジトリ"""

from typing import Optional

from ....shared.logging.config import get_logger
from ...geocoding.domain.models import is_unknown_area
from ...trips.domain.models import Trip
from ..clients.firestore_client import FirestoreClient

logger = get_logger(__name__)


class TripRepository:
    """完了トリップのリポジトリ（ドキュメントID = トリップID）"""

    COLLECTION_NAME = "trips"

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """
        Args:
            firestore_client: Firestoreクライアント
        """
        self.client = firestore_client
        logger.info("TripRepository initialized")

    def get_by_id(self, trip_id: str) -> Optional[Trip]:
        """
        トリップIDでトリップを取得

        Returns:
            Optional[Trip]: トリップ（存在しない場合はNone）
        """
        doc_data = self.client.get_document(self.COLLECTION_NAME, trip_id)

        if doc_data:
            return Trip.from_firestore_dict(doc_data)
        return None

    def list_by_user(self, user_id: str) -> list[Trip]:
        """
        ユーザーのトリップ一覧を取得

        Returns:
            list[Trip]: トリップのリスト（開始時刻の新しい順）
        """
        docs = self.client.query_documents(
            self.COLLECTION_NAME, filters=[("user_id", "==", user_id)]
        )
        trips = [Trip.from_firestore_dict(doc) for doc in docs]
        trips.sort(key=lambda trip: trip.start_time, reverse=True)

        logger.info(f"Retrieved {len(trips)} trips for {user_id}")

        return trips

    def list_by_user_between(
        self, user_id: str, start_date: str, end_date: str
    ) -> list[Trip]:
        """
        開始日が指定範囲（両端を含む）にあるトリップを取得

        範囲条件をクエリに含めると複合インデックスが必要になるため、
        ユーザーIDの等価条件だけで取得してクライアント側で絞り込む。

        Args:
            user_id: ユーザーID
            start_date: 範囲の開始日（YYYY-MM-DD）
            end_date: 範囲の終了日（YYYY-MM-DD）

        Returns:
            list[Trip]: トリップのリスト（開始時刻の古い順）
        """
        docs = self.client.query_documents(
            self.COLLECTION_NAME, filters=[("user_id", "==", user_id)]
        )
        trips = [
            Trip.from_firestore_dict(doc)
            for doc in docs
            if start_date <= doc.get("start_date", "") <= end_date
        ]
        trips.sort(key=lambda trip: trip.start_time)

        logger.info(
            f"Retrieved {len(trips)} trips for {user_id} between {start_date} and {end_date}"
        )

        return trips

    def list_missing_areas(self, user_id: Optional[str] = None) -> list[Trip]:
        """
        開始または終了のエリア名が未解決のトリップを取得

        Firestoreでは複数フィールドのOR条件が扱いにくいため、
        対象ユーザー（Noneの場合は全ユーザー）のトリップを取得して
        クライアント側で絞り込む。
        """
        filters = [("user_id", "==", user_id)] if user_id else None
        docs = self.client.query_documents(self.COLLECTION_NAME, filters=filters)

        trips = [Trip.from_firestore_dict(doc) for doc in docs]
        return [
            trip
            for trip in trips
            if is_unknown_area(trip.start_area) or is_unknown_area(trip.end_area)
        ]

    def update_areas(self, trip: Trip) -> None:
        """トリップのエリア名だけを更新"""
        self.client.update_document(
            self.COLLECTION_NAME,
            trip.trip_id,
            {"start_area": trip.start_area, "end_area": trip.end_area},
        )

    def delete(self, user_id: str, trip_id: str) -> bool:
        """
        ユーザー自身のトリップを削除

        Returns:
            bool: 削除した場合True、存在しないか他ユーザーのトリップの場合False
        """
        trip = self.get_by_id(trip_id)
        if trip is None or trip.user_id != user_id:
            return False

        self.client.delete_document(self.COLLECTION_NAME, trip_id)
        logger.info(f"Trip deleted: {trip_id} ({user_id})")

        return True
