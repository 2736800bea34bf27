"""車両ログCSVの書き出し"""

import csv
import io
import threading
from pathlib import Path

from ....shared.exceptions.errors import ExportError
from ....shared.logging.config import get_logger
from ..domain.models import VEHICLE_LOG_HEADER, VehicleLogRow

logger = get_logger(__name__)


def render_csv(rows: list[VehicleLogRow]) -> str:
    """
    ヘッダー付きのCSV文字列を生成

    Args:
        rows: 車両ログの行

    Returns:
        str: CSVテキスト
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=VEHICLE_LOG_HEADER)
    writer.writeheader()
    for row in rows:
        writer.writerow(row.to_csv_dict())
    return buffer.getvalue()


class VehicleLogWriter:
    """
    トリップ終了ごとに1行追記するマスター車両ログ

    ファイルが存在しない場合はヘッダーから書き始める。
    """

    def __init__(self, log_path: str) -> None:
        """
        Args:
            log_path: CSVファイルのパス
        """
        self.log_path = Path(log_path)
        self._lock = threading.Lock()

        logger.info(f"VehicleLogWriter initialized: {self.log_path}")

    def append(self, row: VehicleLogRow) -> None:
        """
        行を追記

        Raises:
            ExportError: 書き込みに失敗した場合
        """
        try:
            with self._lock:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                write_header = not self.log_path.exists() or self.log_path.stat().st_size == 0

                with self.log_path.open("a", newline="", encoding="utf-8") as f:
                    writer = csv.DictWriter(f, fieldnames=VEHICLE_LOG_HEADER)
                    if write_header:
                        writer.writeheader()
                    writer.writerow(row.to_csv_dict())

            logger.info(f"Vehicle log row appended: {row.began} {row.purpose}")

        except OSError as e:
            raise ExportError(f"Failed to append to {self.log_path}: {e}") from e
