"""距離の計算と丸め"""

import math
from typing import Any, Optional

from ..domain.models import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(start: Coordinate, end: Coordinate) -> float:
    """
    2点間の大圏距離（km、小数点以下2桁に四捨五入）

    Args:
        start: 始点
        end: 終点

    Returns:
        float: 距離（km）
    """
    lat1 = math.radians(start.latitude)
    lat2 = math.radians(end.latitude)
    d_lat = math.radians(end.latitude - start.latitude)
    d_lon = math.radians(end.longitude - start.longitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round_half_up(EARTH_RADIUS_KM * c, 2)


def round_half_up(value: float, digits: int = 0) -> float:
    """0.5を切り上げる四捨五入（組み込みのround()は偶数丸め）"""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_distance(value: Any) -> int:
    """
    距離・オドメーター値の丸め

    小数部が0.5以下なら切り捨て、0.5より大きければ切り上げる。
    ちょうど0.5は切り捨てになる点が通常の四捨五入と異なる。
    数値でない値、NaN、無限大は0とする。

    Examples:
        >>> round_distance(3.5)
        3
        >>> round_distance(3.50001)
        4
        >>> round_distance(-1.3)
        -1
    """
    number = to_number(value)
    if number is None:
        return 0

    floor = math.floor(number)
    if number - floor <= 0.5:
        return floor
    return math.ceil(number)


def to_number(value: Any) -> Optional[float]:
    """有限の数値ならfloatで返し、それ以外はNone"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)
