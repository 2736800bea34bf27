"""トリップ機能のドメインモデル"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ...distance.domain.enums import DistanceSource
from ...distance.domain.models import Coordinate, ReconciledDistance
from ...geocoding.domain.models import UNKNOWN_AREA


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class UserData:
    """ユーザーごとの車両情報"""

    user_id: str
    current_odometer: float = 0.0

    def to_firestore_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "current_odometer": self.current_odometer}

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> "UserData":
        return cls(
            user_id=data["user_id"],
            current_odometer=data.get("current_odometer") or 0.0,
        )


@dataclass
class RoutePoint:
    """トリップ中に記録したGPSポイント"""

    latitude: float
    longitude: float
    accuracy: float = 0.0  # 精度（m）
    timestamp: datetime = field(default_factory=_utcnow)

    def to_firestore_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> "RoutePoint":
        return cls(
            latitude=data["latitude"],
            longitude=data["longitude"],
            accuracy=data.get("accuracy") or 0.0,
            timestamp=data.get("timestamp") or _utcnow(),
        )

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": _isoformat(self.timestamp),
        }


@dataclass
class ActiveTrip:
    """
    進行中のトリップ

    ユーザーごとに最大1件。ユーザーIDをドキュメントIDとして保存する。
    """

    trip_id: str
    user_id: str
    purpose: str
    start_date: str  # ユーザー入力の日付（YYYY-MM-DD）
    start_odometer: float
    start_latitude: float
    start_longitude: float
    start_area: str = UNKNOWN_AREA
    start_time: datetime = field(default_factory=_utcnow)
    route_points: list[RoutePoint] = field(default_factory=list)

    @property
    def start_coordinate(self) -> Coordinate:
        return Coordinate(self.start_latitude, self.start_longitude)

    def to_firestore_dict(self) -> dict[str, Any]:
        """Firestore保存用の辞書に変換"""
        return {
            "trip_id": self.trip_id,
            "user_id": self.user_id,
            "purpose": self.purpose,
            "start_date": self.start_date,
            "start_odometer": self.start_odometer,
            "start_latitude": self.start_latitude,
            "start_longitude": self.start_longitude,
            "start_area": self.start_area,
            "start_time": self.start_time,
            "route_points": [point.to_firestore_dict() for point in self.route_points],
        }

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> "ActiveTrip":
        """Firestoreのデータから進行中トリップを生成"""
        return cls(
            trip_id=data["trip_id"],
            user_id=data["user_id"],
            purpose=data["purpose"],
            start_date=data["start_date"],
            start_odometer=data.get("start_odometer") or 0.0,
            start_latitude=data["start_latitude"],
            start_longitude=data["start_longitude"],
            start_area=data.get("start_area") or UNKNOWN_AREA,
            start_time=data.get("start_time") or _utcnow(),
            route_points=[
                RoutePoint.from_firestore_dict(point)
                for point in data.get("route_points", [])
            ],
        )

    def to_api_dict(self) -> dict[str, Any]:
        """APIレスポンス用の辞書（camelCase）"""
        return {
            "id": self.trip_id,
            "userId": self.user_id,
            "purpose": self.purpose,
            "startDate": self.start_date,
            "startOdometer": self.start_odometer,
            "startLatitude": self.start_latitude,
            "startLongitude": self.start_longitude,
            "startArea": self.start_area,
            "startTime": _isoformat(self.start_time),
            "routePoints": [point.to_api_dict() for point in self.route_points],
            "active": True,
        }


@dataclass
class Trip:
    """
    完了したトリップ

    終了時に一度だけ作成され、以降は削除とエリア名の補完以外で変更しない。
    """

    trip_id: str
    user_id: str
    purpose: str
    start_date: str
    end_date: str
    start_odometer: float
    end_odometer: float
    total_distance: float
    distance_source: DistanceSource
    start_latitude: float
    start_longitude: float
    end_latitude: float
    end_longitude: float
    start_time: datetime
    end_time: datetime
    start_area: str = UNKNOWN_AREA
    end_area: str = UNKNOWN_AREA
    gps_distance: float = 0.0  # クライアントが送ったGPS距離（参考値）
    route_points: list[RoutePoint] = field(default_factory=list)

    @property
    def start_coordinate(self) -> Coordinate:
        return Coordinate(self.start_latitude, self.start_longitude)

    @property
    def end_coordinate(self) -> Coordinate:
        return Coordinate(self.end_latitude, self.end_longitude)

    @classmethod
    def from_active(
        cls,
        active: ActiveTrip,
        end: Coordinate,
        reconciled: ReconciledDistance,
        start_area: str,
        end_area: str,
        gps_distance: Optional[float] = None,
        end_time: Optional[datetime] = None,
    ) -> "Trip":
        """
        進行中トリップから完了トリップを生成

        終了日は開始日と同じ日付を記録する（車両ログは1トリップ1日）。
        """
        return cls(
            trip_id=active.trip_id,
            user_id=active.user_id,
            purpose=active.purpose,
            start_date=active.start_date,
            end_date=active.start_date,
            start_odometer=active.start_odometer,
            end_odometer=reconciled.new_odometer,
            total_distance=reconciled.distance_km,
            distance_source=reconciled.source,
            start_latitude=active.start_latitude,
            start_longitude=active.start_longitude,
            end_latitude=end.latitude,
            end_longitude=end.longitude,
            start_time=active.start_time,
            end_time=end_time or _utcnow(),
            start_area=start_area,
            end_area=end_area,
            gps_distance=gps_distance or 0.0,
            route_points=list(active.route_points),
        )

    def to_firestore_dict(self) -> dict[str, Any]:
        """Firestore保存用の辞書に変換"""
        return {
            "trip_id": self.trip_id,
            "user_id": self.user_id,
            "purpose": self.purpose,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "start_odometer": self.start_odometer,
            "end_odometer": self.end_odometer,
            "total_distance": self.total_distance,
            "distance_source": self.distance_source.value,
            "start_latitude": self.start_latitude,
            "start_longitude": self.start_longitude,
            "end_latitude": self.end_latitude,
            "end_longitude": self.end_longitude,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "start_area": self.start_area,
            "end_area": self.end_area,
            "gps_distance": self.gps_distance,
            "route_points": [point.to_firestore_dict() for point in self.route_points],
        }

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> "Trip":
        """Firestoreのデータから完了トリップを生成"""
        return cls(
            trip_id=data["trip_id"],
            user_id=data["user_id"],
            purpose=data.get("purpose", ""),
            start_date=data["start_date"],
            end_date=data.get("end_date") or data["start_date"],
            start_odometer=data.get("start_odometer") or 0.0,
            end_odometer=data.get("end_odometer") or 0.0,
            total_distance=data.get("total_distance") or 0.0,
            distance_source=DistanceSource(
                data.get("distance_source", DistanceSource.STRAIGHT_LINE.value)
            ),
            start_latitude=data["start_latitude"],
            start_longitude=data["start_longitude"],
            end_latitude=data["end_latitude"],
            end_longitude=data["end_longitude"],
            start_time=data["start_time"],
            end_time=data.get("end_time") or data["start_time"],
            start_area=data.get("start_area") or UNKNOWN_AREA,
            end_area=data.get("end_area") or UNKNOWN_AREA,
            gps_distance=data.get("gps_distance") or 0.0,
            route_points=[
                RoutePoint.from_firestore_dict(point)
                for point in data.get("route_points", [])
            ],
        )

    def to_api_dict(self) -> dict[str, Any]:
        """APIレスポンス用の辞書（camelCase）"""
        return {
            "id": self.trip_id,
            "userId": self.user_id,
            "purpose": self.purpose,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "startOdometer": self.start_odometer,
            "endOdometer": self.end_odometer,
            "totalDistance": self.total_distance,
            "distanceSource": self.distance_source.value,
            "startLatitude": self.start_latitude,
            "startLongitude": self.start_longitude,
            "endLatitude": self.end_latitude,
            "endLongitude": self.end_longitude,
            "startTime": _isoformat(self.start_time),
            "endTime": _isoformat(self.end_time),
            "startArea": self.start_area,
            "endArea": self.end_area,
            "gpsDistance": self.gps_distance,
            "routePoints": [point.to_api_dict() for point in self.route_points],
            "active": False,
        }
