"""Google Maps Geocoding API実装"""
from typing import Any, Optional

import googlemaps

from ..domain.models import GeoLocation
from ....shared.exceptions.errors import GeocodingError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

# エリア名として採用するaddress_componentsのtype（優先順）
AREA_COMPONENT_TYPES = (
    "locality",
    "postal_town",
    "administrative_area_level_2",
    "administrative_area_level_1",
)


class GoogleMapsGeocoder:
    """Google Maps Reverse Geocoding API実装"""

    def __init__(self, api_key: str, timeout: float = 15) -> None:
        """
        Args:
            api_key: Google Maps API キー
            timeout: タイムアウト（秒）
        """
        try:
            self.client = googlemaps.Client(key=api_key, timeout=timeout)
            logger.info("GoogleMapsGeocoder initialized")
        except Exception as e:
            raise GeocodingError(f"Failed to initialize Google Maps client: {e}") from e

    def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> Optional[GeoLocation]:
        """
        座標からエリア名を取得（逆ジオコーディング）

        Args:
            latitude: 緯度
            longitude: 経度

        Returns:
            Optional[GeoLocation]: 地理的位置情報（見つからない場合はNone）

        Raises:
            GeocodingError: APIリクエストに失敗した場合
        """
        try:
            logger.debug(f"Reverse geocoding: ({latitude}, {longitude})")

            results = self.client.reverse_geocode((latitude, longitude))

        except googlemaps.exceptions.ApiError as e:
            raise GeocodingError(f"Google Maps API error: {e}") from e
        except googlemaps.exceptions.TransportError as e:
            raise GeocodingError(f"Google Maps transport error: {e}") from e
        except Exception as e:
            raise GeocodingError(
                f"Unexpected error during reverse geocoding: {e}"
            ) from e

        if not results:
            logger.warning(
                f"No reverse geocoding results for: ({latitude}, {longitude})"
            )
            return None

        result = results[0]
        area = self._extract_area(results)
        if not area:
            return None

        logger.debug(f"Reverse geocoded: ({latitude}, {longitude}) -> {area}")

        return GeoLocation(
            latitude=latitude,
            longitude=longitude,
            area=area,
            formatted_address=result.get("formatted_address"),
            place_id=result.get("place_id"),
        )

    @staticmethod
    def _extract_area(results: list[dict[str, Any]]) -> Optional[str]:
        """全結果のaddress_componentsから優先度の高いtypeのlong_nameを選ぶ"""
        for component_type in AREA_COMPONENT_TYPES:
            for result in results:
                for component in result.get("address_components", []):
                    if component_type in component.get("types", []):
                        return component.get("long_name")
        return None
