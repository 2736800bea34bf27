"""トリップ距離の決定

終了時に送られてくる複数の距離情報のうち、どれを正とするかを決め、
丸めた距離と新しいオドメーター値を算出する。

優先順位（先に一致したものを採用）:

1. ユーザーが終了オドメーターを入力した → 入力値 - 開始時オドメーター
2. GPS計測距離が0.01kmより大きい → GPS計測距離
3. それ以外 → 始点と終点の直線距離（Haversine）

状態を持たない純粋関数のため、リクエストスレッドから同時に呼び出してよい。
"""

from typing import Any, Optional

from ....shared.logging.config import get_logger
from ..domain.enums import DistanceSource
from ..domain.models import Coordinate, ReconciledDistance
from .distance_calculator import haversine_km, round_distance, to_number

logger = get_logger(__name__)

# これ以下のGPS距離は計測失敗とみなす
GPS_MIN_DISTANCE_KM = 0.01


def reconcile(
    start: Coordinate,
    end: Coordinate,
    gps_distance_km: Optional[Any] = None,
    user_end_odometer: Optional[Any] = None,
    current_odometer: Optional[Any] = 0.0,
) -> ReconciledDistance:
    """
    トリップ距離と終了オドメーターを決定

    入力値の検証は行わず、数値でないものは未指定として扱う。

    Args:
        start: 開始地点
        end: 終了地点
        gps_distance_km: クライアントが計測したルート距離（km）
        user_end_odometer: ユーザーが入力した終了オドメーター
        current_odometer: トリップ開始時のオドメーター（未指定は0）

    Returns:
        ReconciledDistance: 丸め後の距離、新しいオドメーター、算出元
    """
    current = to_number(current_odometer) or 0.0
    user_end = to_number(user_end_odometer)
    gps = to_number(gps_distance_km)

    straight_line = haversine_km(start, end)

    if user_end is not None:
        # 入力値が開始時より小さい場合は距離0とし、非負を保つ
        distance = max(user_end - current, 0.0)
        source = DistanceSource.ODOMETER
    elif gps is not None and gps > GPS_MIN_DISTANCE_KM:
        distance = gps
        source = DistanceSource.GPS
    else:
        distance = straight_line
        source = DistanceSource.STRAIGHT_LINE

    rounded_distance = round_distance(distance)

    if user_end is not None:
        new_odometer = round_distance(user_end)
    else:
        new_odometer = round_distance(current + rounded_distance)

    logger.debug(
        f"Reconciled distance: gps={gps_distance_km}, straight_line={straight_line}km, "
        f"using={distance}km ({source.value}), rounded={rounded_distance}km, "
        f"odometer {current} -> {new_odometer}"
    )

    return ReconciledDistance(
        distance_km=rounded_distance,
        new_odometer=new_odometer,
        source=source,
        straight_line_km=straight_line,
    )
