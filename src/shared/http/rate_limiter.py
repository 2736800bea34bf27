"""リクエスト間隔の制御"""

import threading
import time
from typing import Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    前回のリクエストから最低限の間隔を空ける

    Nominatimの公開サーバーは1リクエスト/秒まで。複数のリクエストスレッドで
    共有するため、待機中もロックを保持して呼び出しを直列化する。
    """

    def __init__(self, min_interval: float = 1.0):
        """
        Args:
            min_interval: リクエスト間の最小間隔（秒）
        """
        self.min_interval = min_interval
        self.last_request_time: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """
        次のリクエストを送ってよい時刻まで待機

        Returns:
            float: 実際に待機した秒数
        """
        with self._lock:
            slept = 0.0

            if self.last_request_time is not None:
                elapsed = time.monotonic() - self.last_request_time
                if elapsed < self.min_interval:
                    slept = self.min_interval - elapsed
                    logger.debug(f"Rate limiting: sleeping for {slept:.2f}s")
                    time.sleep(slept)

            self.last_request_time = time.monotonic()
            return slept
