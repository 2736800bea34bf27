"""距離計算のEnum定義"""
from enum import Enum


class DistanceSource(str, Enum):
    """トリップ距離の算出元（値はAPIレスポンスとログにそのまま出る）"""

    ODOMETER = "odometer reading"  # ユーザー入力の終了オドメーター
    GPS = "GPS tracking"  # クライアントが計測したルート距離
    STRAIGHT_LINE = "straight-line calculation"  # 始点と終点の大圏距離
