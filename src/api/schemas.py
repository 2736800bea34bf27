"""APIのリクエストモデル"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..features.trips.domain.models import RoutePoint


class CamelModel(BaseModel):
    """JSONのキーはcamelCase、Python側はsnake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class OdometerRequest(CamelModel):
    odometer: Optional[float] = None


class StartTripRequest(CamelModel):
    purpose: Optional[str] = None
    date: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class EndTripRequest(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    # 数値として扱えない値は距離の算出時に無視される（400にはしない）
    gps_distance: Optional[Any] = None
    user_provided_end_odometer: Optional[Any] = None
    # 旧クライアント互換のため受け付けるが、距離はオドメーターの差分から計算する
    actual_travelled_distance: Optional[Any] = None


class RoutePointRequest(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    timestamp: Optional[datetime] = None

    def to_route_point(self) -> Optional[RoutePoint]:
        """座標が揃っていればRoutePointに変換（タイムゾーンなしはUTCとみなす）"""
        if self.latitude is None or self.longitude is None:
            return None

        timestamp = self.timestamp or datetime.now(timezone.utc)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return RoutePoint(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy or 0.0,
            timestamp=timestamp,
        )


class SyncRequest(RoutePointRequest):
    """
    Service Workerが再送するオフライン中の位置情報

    1件分のフィールドを直接送るか、pointsにまとめて送る。
    """

    id: Optional[Any] = None  # クライアント側キューのID（保存しない）
    points: Optional[list[RoutePointRequest]] = None

    def to_route_points(self) -> list[RoutePoint]:
        requests = self.points if self.points else [self]
        points = [request.to_route_point() for request in requests]
        return [point for point in points if point is not None]


class ExportRequest(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
