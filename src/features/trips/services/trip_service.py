"""トリップの開始・記録・終了サービス"""

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from tqdm import tqdm

from ....shared.exceptions.errors import (
    DuplicateError,
    ExportError,
    NotFoundError,
    StorageError,
    TripStateError,
    ValidationError,
)
from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import fbt_year_ending, now_utc
from ...distance.domain.models import Coordinate, ReconciledDistance
from ...distance.services.distance_calculator import to_number
from ...distance.services.distance_reconciler import reconcile
from ...export.domain.models import VehicleLogRow
from ...export.services.vehicle_log_writer import VehicleLogWriter
from ...geocoding.domain.models import is_unknown_area
from ...geocoding.services.area_service import AreaService
from ...storage.repositories.active_trip_repository import ActiveTripRepository
from ...storage.repositories.trip_repository import TripRepository
from ...storage.repositories.user_data_repository import UserDataRepository
from ...storage.repositories.user_repository import UserRepository
from ..domain.models import ActiveTrip, RoutePoint, Trip

logger = get_logger(__name__)


@dataclass
class EndTripResult:
    """トリップ終了の結果"""

    trip: Trip
    reconciled: ReconciledDistance

    @property
    def message(self) -> str:
        return (
            f"Trip ended successfully! Distance: {self.reconciled.distance_km}km "
            f"({self.reconciled.source.value}). "
            f"Current odometer: {round(self.trip.end_odometer)}km"
        )


class TripService:
    """
    トリップのライフサイクルを管理するサービス

    進行中トリップの作成・更新・確定はリポジトリ側で排他制御されるため、
    同じユーザーから同時にリクエストが来ても更新は失われない。
    """

    def __init__(
        self,
        user_repository: UserRepository,
        user_data_repository: UserDataRepository,
        active_trip_repository: ActiveTripRepository,
        trip_repository: TripRepository,
        area_service: AreaService,
        vehicle_log_writer: Optional[VehicleLogWriter] = None,
        max_route_points: int = 1000,
    ) -> None:
        """
        Args:
            user_repository: ユーザーリポジトリ（車両ログの運転者名に使用）
            user_data_repository: オドメーターのリポジトリ
            active_trip_repository: 進行中トリップのリポジトリ
            trip_repository: 完了トリップのリポジトリ
            area_service: エリア名解決サービス
            vehicle_log_writer: マスター車両ログ（Noneの場合は追記しない）
            max_route_points: 進行中トリップに保持するGPSポイントの上限
        """
        self.user_repository = user_repository
        self.user_data_repository = user_data_repository
        self.active_trip_repository = active_trip_repository
        self.trip_repository = trip_repository
        self.area_service = area_service
        self.vehicle_log_writer = vehicle_log_writer
        self.max_route_points = max_route_points

        logger.info(f"TripService initialized: max_route_points={max_route_points}")

    # オドメーター

    def get_odometer(self, user_id: str) -> float:
        """現在のオドメーターを取得"""
        return self.user_data_repository.get_or_create(user_id).current_odometer

    def set_odometer(self, user_id: str, odometer: Any) -> float:
        """
        現在のオドメーターを設定

        Raises:
            ValidationError: 数値でない、または負の場合
        """
        value = to_number(odometer)
        if value is None or value < 0:
            raise ValidationError("Valid odometer reading is required")

        return self.user_data_repository.set_odometer(user_id, value).current_odometer

    # トリップ

    def start_trip(
        self,
        user_id: str,
        purpose: Optional[str],
        date: Optional[str],
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> ActiveTrip:
        """
        トリップを開始

        Raises:
            ValidationError: 入力が不足している場合
            TripStateError: 既に進行中のトリップがある場合
        """
        if not purpose or not purpose.strip():
            raise ValidationError("Purpose of trip is required")

        if not date:
            raise ValidationError("Trip date is required")

        if latitude is None or longitude is None:
            raise ValidationError("Location coordinates are required")

        # 逆ジオコーディングの前に確認して無駄なAPI呼び出しを避ける
        if self.active_trip_repository.get(user_id):
            raise TripStateError("Please end current trip before starting a new one")

        user_data = self.user_data_repository.get_or_create(user_id)
        start = Coordinate(latitude, longitude)
        start_area = self.area_service.resolve_area(start)

        trip = ActiveTrip(
            trip_id=uuid.uuid4().hex,
            user_id=user_id,
            purpose=purpose.strip(),
            start_date=date,
            start_odometer=user_data.current_odometer,
            start_latitude=latitude,
            start_longitude=longitude,
            start_area=start_area,
        )

        try:
            self.active_trip_repository.create(trip)
        except DuplicateError as e:
            raise TripStateError("Please end current trip before starting a new one") from e

        logger.info(
            f"Trip started: {trip.trip_id} ({user_id}) from {start_area}, "
            f"odometer={trip.start_odometer}"
        )
        return trip

    def end_trip(
        self,
        user_id: str,
        latitude: Optional[float],
        longitude: Optional[float],
        gps_distance: Optional[Any] = None,
        user_end_odometer: Optional[Any] = None,
    ) -> EndTripResult:
        """
        進行中のトリップを終了

        距離を決定し、完了トリップの保存・オドメーター更新・進行中トリップの
        削除を一括で行ったあと、マスター車両ログに1行追記する。

        Raises:
            ValidationError: 座標が不足している場合
            TripStateError: 進行中のトリップがない場合
        """
        if latitude is None or longitude is None:
            raise ValidationError("Location coordinates are required")

        active = self.active_trip_repository.get(user_id)
        if active is None:
            raise TripStateError("No active trip found")

        end = Coordinate(latitude, longitude)
        reconciled = reconcile(
            active.start_coordinate,
            end,
            gps_distance_km=gps_distance,
            user_end_odometer=user_end_odometer,
            current_odometer=active.start_odometer,
        )

        logger.info(
            f"Trip end: gps={gps_distance}km, straight_line={reconciled.straight_line_km}km, "
            f"using {reconciled.distance_km}km ({reconciled.source.value})"
        )

        start_area = active.start_area
        if is_unknown_area(start_area):
            start_area = self.area_service.resolve_area(active.start_coordinate)
        end_area = self.area_service.resolve_area(end)

        end_time = now_utc()

        def build_trip(current: ActiveTrip) -> Trip:
            return Trip.from_active(
                current,
                end=end,
                reconciled=reconciled,
                start_area=start_area,
                end_area=end_area,
                gps_distance=to_number(gps_distance),
                end_time=end_time,
            )

        trip = self.active_trip_repository.finalize(
            active, build_trip, reconciled.new_odometer
        )
        if trip is None:
            raise TripStateError("No active trip found")

        self._append_to_vehicle_log(trip)

        return EndTripResult(trip=trip, reconciled=reconciled)

    def record_route_point(
        self,
        user_id: str,
        latitude: Optional[float],
        longitude: Optional[float],
        accuracy: Optional[float] = None,
    ) -> ActiveTrip:
        """
        進行中トリップにGPSポイントを1件追加

        Raises:
            ValidationError: 座標が不足している場合
            TripStateError: 進行中のトリップがない場合
        """
        if latitude is None or longitude is None:
            raise ValidationError("Location coordinates are required")

        point = RoutePoint(latitude=latitude, longitude=longitude, accuracy=accuracy or 0.0)
        updated = self.active_trip_repository.append_route_points(
            user_id, [point], self.max_route_points
        )
        if updated is None:
            raise TripStateError("No active trip found")

        return updated

    def sync_route_points(self, user_id: str, points: list[RoutePoint]) -> int:
        """
        オフライン中にクライアントに溜まったGPSポイントを反映

        進行中のトリップがない場合は破棄する（クライアントのキューを空にするため
        エラーにはしない）。

        Returns:
            int: 反映したポイント数
        """
        if not points:
            return 0

        updated = self.active_trip_repository.append_route_points(
            user_id, points, self.max_route_points
        )
        if updated is None:
            logger.info(
                f"Discarded {len(points)} synced route points for {user_id}: no active trip"
            )
            return 0

        logger.info(f"Synced {len(points)} route points for {user_id}")
        return len(points)

    def get_active_trip(self, user_id: str) -> Optional[ActiveTrip]:
        """進行中のトリップを取得"""
        return self.active_trip_repository.get(user_id)

    def list_trips(self, user_id: str) -> list[Trip]:
        """完了トリップの一覧（新しい順）"""
        return self.trip_repository.list_by_user(user_id)

    def delete_trip(self, user_id: str, trip_id: str) -> None:
        """
        完了トリップを削除

        Raises:
            ValidationError: トリップIDがない場合
            NotFoundError: 自分のトリップが見つからない場合
        """
        if not trip_id:
            raise ValidationError("Trip ID is required")

        if not self.trip_repository.delete(user_id, trip_id):
            raise NotFoundError("Trip not found")

    def backfill_areas(
        self, user_id: Optional[str] = None, show_progress: bool = False
    ) -> dict[str, int]:
        """
        エリア名が未解決の完了トリップを再度逆ジオコーディング

        Args:
            user_id: 対象ユーザー（Noneの場合は全ユーザー）
            show_progress: プログレスバーを表示するか

        Returns:
            dict[str, int]: {"totalChecked": 対象件数, "updated": 更新件数}
        """
        trips = self.trip_repository.list_missing_areas(user_id)
        logger.info(f"Found {len(trips)} trips that need area updates")

        updated_count = 0
        iterator = tqdm(trips, desc="Resolving areas") if show_progress else trips

        for trip in iterator:
            needs_update = False

            if is_unknown_area(trip.start_area):
                area = self.area_service.resolve_area(trip.start_coordinate)
                if not is_unknown_area(area):
                    trip.start_area = area
                    needs_update = True

            if is_unknown_area(trip.end_area):
                area = self.area_service.resolve_area(trip.end_coordinate)
                if not is_unknown_area(area):
                    trip.end_area = area
                    needs_update = True

            if needs_update:
                self.trip_repository.update_areas(trip)
                updated_count += 1
                logger.info(
                    f"Updated trip {trip.trip_id} - Start: {trip.start_area}, End: {trip.end_area}"
                )

        logger.info(f"Area update complete. Updated {updated_count} trips.")

        return {"totalChecked": len(trips), "updated": updated_count}

    def _append_to_vehicle_log(self, trip: Trip) -> None:
        """マスター車両ログに追記（失敗してもトリップ終了は成功扱い）"""
        if self.vehicle_log_writer is None:
            return

        try:
            user = self.user_repository.get_by_email(trip.user_id)
            today = now_utc().date()
            row = VehicleLogRow.from_trip(
                trip,
                driver_name=user.full_name if user else "",
                fbt_year=fbt_year_ending(today),
                date_of_entry=today,
            )
            self.vehicle_log_writer.append(row)
        except (ExportError, StorageError) as e:
            logger.error(f"Vehicle log write error for trip {trip.trip_id}: {e}")
