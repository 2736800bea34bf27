"""車両ログ（Motor Vehicle Log）のドメインモデル"""
from dataclasses import dataclass
from datetime import date
from typing import Any

from ...geocoding.domain.models import UNKNOWN_AREA
from ...trips.domain.models import Trip

# (キー, 見出し) Excelでそのまま開ける12列の固定ヘッダー
VEHICLE_LOG_COLUMNS: list[tuple[str, str]] = [
    ("began", "Date Trip Began"),
    ("ended", "Date Trip Ended"),
    ("purpose", "Purpose of Trip"),
    ("areaFrom", "Area From"),
    ("areaTo", "Area To"),
    ("start", "Odometer Reading Start"),
    ("finish", "Odometer Reading Finish"),
    ("kilometresTravelled", "Kilometres Travelled"),
    ("signatureEntry", "Signature of person making Entry"),
    ("driverName", "Name of Driver or Vehicle Registration No"),
    ("fbtYear", "FBT Year Ending"),
    ("dateOfEntry", "Date of Entry"),
]

VEHICLE_LOG_HEADER = [title for _, title in VEHICLE_LOG_COLUMNS]


@dataclass
class VehicleLogRow:
    """車両ログの1行"""

    began: str
    ended: str
    purpose: str
    area_from: str
    area_to: str
    start: float
    finish: float
    kilometres_travelled: float
    driver_name: str
    fbt_year: int
    date_of_entry: str
    signature_entry: str = ""  # 手書き署名欄のため常に空

    @classmethod
    def from_trip(
        cls, trip: Trip, driver_name: str, fbt_year: int, date_of_entry: date
    ) -> "VehicleLogRow":
        """完了トリップから行を生成"""
        return cls(
            began=trip.start_date,
            ended=trip.end_date,
            purpose=trip.purpose,
            area_from=trip.start_area or UNKNOWN_AREA,
            area_to=trip.end_area or UNKNOWN_AREA,
            start=trip.start_odometer,
            finish=trip.end_odometer,
            kilometres_travelled=trip.total_distance,
            driver_name=driver_name,
            fbt_year=fbt_year,
            date_of_entry=date_of_entry.isoformat(),
        )

    def to_csv_dict(self) -> dict[str, Any]:
        """見出しをキーにした辞書（csv.DictWriter用）"""
        values = {
            "began": self.began,
            "ended": self.ended,
            "purpose": self.purpose,
            "areaFrom": self.area_from,
            "areaTo": self.area_to,
            "start": _format_number(self.start),
            "finish": _format_number(self.finish),
            "kilometresTravelled": _format_number(self.kilometres_travelled),
            "signatureEntry": self.signature_entry,
            "driverName": self.driver_name,
            "fbtYear": self.fbt_year,
            "dateOfEntry": self.date_of_entry,
        }
        return {title: values[key] for key, title in VEHICLE_LOG_COLUMNS}


def _format_number(value: float) -> Any:
    """整数値のfloatは小数点なしで出力する（12345.0 -> 12345）"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
