"""逆ジオコーディング機能のドメインモデル"""
from dataclasses import dataclass
from typing import Optional

# エリア名が解決できなかった場合の表記（CSVにもそのまま出力される）
UNKNOWN_AREA = "Unknown Area"


@dataclass
class GeoLocation:
    """地理的位置情報"""

    latitude: float  # 緯度
    longitude: float  # 経度
    area: Optional[str] = None  # 市区町村などのエリア名
    formatted_address: Optional[str] = None  # 正規化された住所
    place_id: Optional[str] = None  # プロバイダー側のID（オプション）

    def __repr__(self) -> str:
        return f"GeoLocation(lat={self.latitude}, lng={self.longitude}, area={self.area!r})"


def is_unknown_area(area: Optional[str]) -> bool:
    """エリア名が未解決（空、None、Unknown Area）かどうか"""
    return not area or not area.strip() or area == UNKNOWN_AREA
