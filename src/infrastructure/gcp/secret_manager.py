"""GCP Secret Manager連携"""
from typing import Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import secretmanager

from ...shared.exceptions.errors import ConfigurationError
from ...shared.logging.config import get_logger

logger = get_logger(__name__)


class SecretManagerClient:
    """
    Secret Managerクライアント

    JWT署名鍵とGoogle Maps API Keyの取得に使う。起動時に一度だけ
    読むため、取得した値はプロセス内でキャッシュする。
    """

    def __init__(self, project_id: str):
        """
        Args:
            project_id: GCPプロジェクトID
        """
        self.project_id = project_id
        self.client = secretmanager.SecretManagerServiceClient()
        self._cache: dict[str, str] = {}

    def get_secret(self, secret_name: str, version: str = "latest") -> str:
        """
        シークレットの値を取得

        Raises:
            ConfigurationError: 取得に失敗した場合、または値が空の場合
        """
        name = self.client.secret_version_path(self.project_id, secret_name, version)
        if name in self._cache:
            return self._cache[name]

        try:
            response = self.client.access_secret_version(request={"name": name})
        except google_exceptions.GoogleAPICallError as e:
            raise ConfigurationError(f"Failed to fetch secret {secret_name}: {e}") from e

        value = response.payload.data.decode("UTF-8").strip()
        if not value:
            raise ConfigurationError(f"Secret {secret_name} is empty")

        logger.info(f"Fetched secret: {secret_name}")
        self._cache[name] = value
        return value

    def get_secret_or_none(self, secret_name: str, version: str = "latest") -> Optional[str]:
        """任意のシークレットを取得（取得できない場合はNone）"""
        try:
            return self.get_secret(secret_name, version)
        except ConfigurationError as e:
            logger.warning(f"Secret {secret_name} is not available: {e}")
            return None
