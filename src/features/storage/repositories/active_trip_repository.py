"""進行中トリップリポジトリ"""

from typing import Callable, Optional

from google.cloud import firestore

from ....shared.logging.config import get_logger
from ...trips.domain.models import ActiveTrip, RoutePoint, Trip
from ..clients.firestore_client import FirestoreClient
from .trip_repository import TripRepository
from .user_data_repository import UserDataRepository

logger = get_logger(__name__)


class ActiveTripRepository:
    """
    進行中トリップのリポジトリ（ドキュメントID = ユーザーID）

    同一ユーザーからの同時リクエストで更新が失われないよう、
    作成は条件付き作成、更新と終了はトランザクションで行う。
    """

    COLLECTION_NAME = "active_trips"

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """
        Args:
            firestore_client: Firestoreクライアント
        """
        self.client = firestore_client
        logger.info("ActiveTripRepository initialized")

    def create(self, trip: ActiveTrip) -> None:
        """
        進行中トリップを作成

        Raises:
            DuplicateError: 既に進行中のトリップがある場合
        """
        self.client.create_document(
            self.COLLECTION_NAME, trip.user_id, trip.to_firestore_dict()
        )
        logger.info(f"Active trip created: {trip.trip_id} ({trip.user_id})")

    def get(self, user_id: str) -> Optional[ActiveTrip]:
        """
        ユーザーの進行中トリップを取得

        Returns:
            Optional[ActiveTrip]: 進行中トリップ（存在しない場合はNone）
        """
        doc_data = self.client.get_document(self.COLLECTION_NAME, user_id)

        if doc_data:
            return ActiveTrip.from_firestore_dict(doc_data)
        return None

    def append_route_points(
        self, user_id: str, points: list[RoutePoint], max_points: int
    ) -> Optional[ActiveTrip]:
        """
        進行中トリップにGPSポイントを追加

        時刻順に並べ、max_pointsを超えた分は古いものから捨てる。

        Args:
            user_id: ユーザーID
            points: 追加するポイント
            max_points: 保持する最大ポイント数

        Returns:
            Optional[ActiveTrip]: 更新後のトリップ（進行中トリップがない場合はNone）
        """
        active_ref = self.client.document(self.COLLECTION_NAME, user_id)

        def _append(transaction: firestore.Transaction) -> Optional[ActiveTrip]:
            snapshot = active_ref.get(transaction=transaction)
            if not snapshot.exists:
                return None

            active = ActiveTrip.from_firestore_dict(snapshot.to_dict())
            merged = sorted(
                active.route_points + points, key=lambda point: point.timestamp
            )
            active.route_points = merged[-max_points:]

            transaction.update(
                active_ref,
                {"route_points": [point.to_firestore_dict() for point in active.route_points]},
            )
            return active

        updated = self.client.run_transaction(_append)
        if updated:
            logger.debug(
                f"Route points appended: {len(points)} ({user_id}, total={len(updated.route_points)})"
            )
        return updated

    def finalize(
        self,
        active: ActiveTrip,
        build_trip: Callable[[ActiveTrip], Trip],
        new_odometer: float,
    ) -> Optional[Trip]:
        """
        進行中トリップを完了トリップとして確定

        完了トリップの保存、オドメーターの更新、進行中トリップの削除を
        1つのトランザクションで行う。完了トリップはトランザクション内で
        読み直した進行中トリップから作るため、終了処理中に追加された
        GPSポイントも含まれる。進行中トリップが既に終了済み、または
        別のトリップに置き換わっていた場合は何も書き込まない。

        Args:
            active: 終了処理の対象として読み取った進行中トリップ
            build_trip: 読み直した進行中トリップから完了トリップを作る関数
            new_odometer: 更新後のオドメーター

        Returns:
            Optional[Trip]: 保存した完了トリップ（確定できなかった場合はNone）
        """
        active_ref = self.client.document(self.COLLECTION_NAME, active.user_id)
        user_data_ref = self.client.document(
            UserDataRepository.COLLECTION_NAME, active.user_id
        )

        def _finalize(transaction: firestore.Transaction) -> Optional[Trip]:
            snapshot = active_ref.get(transaction=transaction)
            if not snapshot.exists:
                return None

            current = ActiveTrip.from_firestore_dict(snapshot.to_dict())
            if current.trip_id != active.trip_id:
                return None

            trip = build_trip(current)
            trip_ref = self.client.document(TripRepository.COLLECTION_NAME, trip.trip_id)

            transaction.set(trip_ref, trip.to_firestore_dict())
            transaction.set(
                user_data_ref,
                {"user_id": active.user_id, "current_odometer": new_odometer},
                merge=True,
            )
            transaction.delete(active_ref)
            return trip

        trip = self.client.run_transaction(_finalize)
        if trip:
            logger.info(
                f"Trip finalized: {trip.trip_id} ({active.user_id}), "
                f"odometer={new_odometer}, route_points={len(trip.route_points)}"
            )
        else:
            logger.warning(
                f"Active trip {active.trip_id} for {active.user_id} changed before it could be finalized"
            )
        return trip
