"""エリア名解決サービス"""

from typing import Optional

from ....shared.exceptions.errors import GeocodingError
from ....shared.logging.config import get_logger
from ...distance.domain.models import Coordinate
from ..domain.models import UNKNOWN_AREA
from ..providers.cache_geocoder import CacheGeocoder, ReverseGeocoder

logger = get_logger(__name__)


class AreaService:
    """
    座標を人が読めるエリア名に変換するサービス

    トリップの開始・終了処理を止めないよう、失敗時は例外を送出せず
    UNKNOWN_AREA を返す。
    """

    def __init__(self, geocoder: Optional[ReverseGeocoder]) -> None:
        """
        Args:
            geocoder: 逆ジオコーダー（Noneの場合は逆ジオコーディング無効）
        """
        self.geocoder = geocoder

        logger.info(
            f"AreaService initialized: geocoder={type(geocoder).__name__ if geocoder else None}"
        )

    @property
    def enabled(self) -> bool:
        """逆ジオコーディングが有効かどうか"""
        return self.geocoder is not None

    def resolve_area(self, coordinate: Coordinate) -> str:
        """
        座標のエリア名を取得

        Args:
            coordinate: 座標

        Returns:
            str: エリア名（解決できない場合は UNKNOWN_AREA）
        """
        if self.geocoder is None:
            return UNKNOWN_AREA

        try:
            geo_location = self.geocoder.reverse_geocode(
                coordinate.latitude, coordinate.longitude
            )
        except GeocodingError as e:
            logger.error(
                f"Reverse geocoding failed for ({coordinate.latitude}, {coordinate.longitude}): {e}"
            )
            return UNKNOWN_AREA
        except Exception as e:
            logger.error(
                f"Unexpected error during reverse geocoding for "
                f"({coordinate.latitude}, {coordinate.longitude}): {e}",
                exc_info=True,
            )
            return UNKNOWN_AREA

        if geo_location is None or not geo_location.area:
            logger.info(
                f"No area resolved for ({coordinate.latitude}, {coordinate.longitude}), using {UNKNOWN_AREA}"
            )
            return UNKNOWN_AREA

        logger.info(f"Resolved area: {geo_location.area}")
        return geo_location.area

    def get_cache_stats(self) -> Optional[dict[str, float]]:
        """キャッシュ統計を取得（CacheGeocoderを使用している場合のみ）"""
        if isinstance(self.geocoder, CacheGeocoder):
            return self.geocoder.get_cache_stats()
        logger.warning("Cache stats are only available when using CacheGeocoder")
        return None
