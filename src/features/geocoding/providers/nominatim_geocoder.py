"""OpenStreetMap Nominatim 逆ジオコーディング実装"""
from typing import Any, Optional

from ..domain.models import GeoLocation
from ....shared.exceptions.errors import GeocodingError, HTTPError
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

# エリア名として採用するaddressのキー（優先順）
AREA_KEYS = ("city", "town", "village", "county", "state")


class NominatimGeocoder:
    """
    Nominatim APIを使った逆ジオコーダー

    無料のパブリックインスタンスは1リクエスト/秒の制限があるため、
    RateLimiterで間隔を空けてから呼び出す。
    """

    def __init__(
        self,
        http_client: HTTPClient,
        base_url: str = "https://nominatim.openstreetmap.org",
        rate_limiter: Optional[RateLimiter] = None,
        zoom: int = 10,
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント
            base_url: NominatimのベースURL
            rate_limiter: レート制限（Noneの場合は待機しない）
            zoom: 住所の詳細度（10 = 市区町村レベル）
        """
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter
        self.zoom = zoom

        logger.info(f"NominatimGeocoder initialized: {self.base_url}")

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        """
        座標からエリア名を取得

        Args:
            latitude: 緯度
            longitude: 経度

        Returns:
            Optional[GeoLocation]: 地理的位置情報（見つからない場合はNone）

        Raises:
            GeocodingError: APIリクエストに失敗した場合
        """
        if self.rate_limiter:
            self.rate_limiter.wait()

        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "zoom": self.zoom,
            "addressdetails": 1,
        }

        try:
            logger.debug(f"Reverse geocoding via Nominatim: ({latitude}, {longitude})")
            data = self.http_client.get_json(f"{self.base_url}/reverse", params=params)
        except HTTPError as e:
            raise GeocodingError(f"Nominatim request failed: {e}") from e

        if not isinstance(data, dict) or "error" in data:
            logger.warning(f"No reverse geocoding results for: ({latitude}, {longitude})")
            return None

        area = self._extract_area(data.get("address"))
        if not area:
            logger.info(f"No area in Nominatim response for: ({latitude}, {longitude})")
            return None

        logger.debug(f"Reverse geocoded: ({latitude}, {longitude}) -> {area}")

        return GeoLocation(
            latitude=latitude,
            longitude=longitude,
            area=area,
            formatted_address=data.get("display_name"),
            place_id=str(data["place_id"]) if data.get("place_id") is not None else None,
        )

    @staticmethod
    def _extract_area(address: Any) -> Optional[str]:
        """addressから最も適切なエリア名を選ぶ"""
        if not isinstance(address, dict):
            return None

        for key in AREA_KEYS:
            value = address.get(key)
            if value:
                return value

        return None
