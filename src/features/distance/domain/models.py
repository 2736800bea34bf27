"""距離計算のドメインモデル"""
from dataclasses import dataclass

from .enums import DistanceSource


@dataclass(frozen=True)
class Coordinate:
    """WGS-84の座標（度）"""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class ReconciledDistance:
    """距離の決定結果"""

    distance_km: int  # 丸め後のトリップ距離
    new_odometer: int  # トリップ終了後のオドメーター
    source: DistanceSource
    straight_line_km: float  # 参考値として常に計算する直線距離
