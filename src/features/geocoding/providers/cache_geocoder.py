"""キャッシュ付き逆ジオコーダー"""

import threading
from typing import Optional, Protocol

from ....shared.logging.config import get_logger
from ..domain.models import GeoLocation

logger = get_logger(__name__)


class ReverseGeocoder(Protocol):
    """逆ジオコーダーのインターフェース"""

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        ...


class CacheGeocoder:
    """
    キャッシュ付き逆ジオコーダー

    同じ地点（自宅、職場など）からの開始・終了が多いため、
    座標をキーにメモリ内でキャッシュしてAPI呼び出しを削減する。
    上限を超えたら古いエントリから捨てる。
    """

    def __init__(self, geocoder: ReverseGeocoder, max_size: int = 5000) -> None:
        """
        Args:
            geocoder: ベースとなるジオコーダー
            max_size: キャッシュの最大エントリ数
        """
        self.geocoder = geocoder
        self.max_size = max_size
        self.cache: dict[str, Optional[GeoLocation]] = {}
        self.hit_count = 0
        self.miss_count = 0
        self._lock = threading.Lock()

        logger.info(f"CacheGeocoder initialized: max_size={max_size}")

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        """
        座標から住所を取得（逆ジオコーディング、キャッシュあり）

        ベースのジオコーダーが例外を送出した場合はキャッシュしない。

        Args:
            latitude: 緯度
            longitude: 経度

        Returns:
            Optional[GeoLocation]: 地理的位置情報（見つからない場合はNone）
        """
        # 座標をキーとして使用（小数点以下6桁で丸める）
        cache_key = f"{latitude:.6f},{longitude:.6f}"

        with self._lock:
            if cache_key in self.cache:
                self.hit_count += 1
                logger.debug(f"Cache hit for coordinates: ({latitude}, {longitude})")
                return self.cache[cache_key]
            self.miss_count += 1

        logger.debug(f"Cache miss for coordinates: ({latitude}, {longitude})")

        geo_location = self.geocoder.reverse_geocode(latitude, longitude)

        with self._lock:
            if len(self.cache) >= self.max_size:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]
            self.cache[cache_key] = geo_location

        return geo_location

    def clear_cache(self) -> None:
        """キャッシュをクリア"""
        with self._lock:
            cache_size = len(self.cache)
            self.cache.clear()
            self.hit_count = 0
            self.miss_count = 0
        logger.info(f"Cache cleared: {cache_size} entries removed")

    def get_cache_stats(self) -> dict[str, float]:
        """
        キャッシュ統計を取得

        Returns:
            dict[str, float]: キャッシュ統計（サイズ、ヒット数、ミス数、ヒット率）
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = (self.hit_count / total_requests * 100) if total_requests > 0 else 0.0

        stats = {
            "cache_size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "total_requests": total_requests,
            "hit_rate_percent": round(hit_rate, 2),
        }

        logger.info(f"Cache stats: {stats}")

        return stats
