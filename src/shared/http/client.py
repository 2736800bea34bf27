"""外部JSON API用HTTPクライアント"""

from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions.errors import HTTPError
from ..logging.config import get_logger

logger = get_logger(__name__)

# Nominatimの利用規約でアプリを識別できるUser-Agentが必須
DEFAULT_USER_AGENT = "TripGo-App/1.0 (trip-tracking-application)"

# 429はRetry-Afterに従って待ってから再試行する
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class HTTPClient:
    """
    JSONを返す外部API（逆ジオコーディング）を呼び出すクライアント

    GETのみ自動リトライする。トリップ終了のリクエスト内で呼ばれるため、
    リトライ回数は少なめにしてレスポンスが遅れすぎないようにしている。
    """

    def __init__(
        self,
        timeout: float = 15,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        user_agent: Optional[str] = None,
        accept_language: Optional[str] = None,
    ):
        """
        Args:
            timeout: リクエストタイムアウト（秒）
            max_retries: 最大リトライ回数
            backoff_factor: バックオフ係数
            user_agent: User-Agentヘッダー
            accept_language: Accept-Languageヘッダー（エリア名の言語）
        """
        self.timeout = timeout
        self.session = requests.Session()

        retry = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=["GET"],
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT, "Accept": "application/json"}
        if accept_language:
            headers["Accept-Language"] = accept_language
        self.session.headers.update(headers)

    def get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GETリクエストを送りJSONとしてデコード

        Args:
            url: リクエストURL
            params: クエリパラメータ

        Returns:
            デコードしたJSON

        Raises:
            HTTPError: 通信失敗、2xx以外のステータス、JSONとして解釈できない場合
        """
        try:
            logger.debug(f"GET {url} params={params}")
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"GET request failed: {url} - {e}")
            raise HTTPError(f"Failed to GET {url}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise HTTPError(f"Invalid JSON from {url}: {e}") from e

    def close(self) -> None:
        """セッションをクローズ"""
        self.session.close()
