"""ロギング設定"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 依存ライブラリのうち、既定のままだとリクエストごとに大量に出力するもの
QUIET_LOGGERS = {
    "urllib3": logging.WARNING,
    "google": logging.WARNING,
    "googlemaps": logging.WARNING,
    "multipart": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}

_logger_configured = False


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _cloud_handler(level: int, project_id: Optional[str]) -> Optional[logging.Handler]:
    """Cloud Loggingのハンドラー（作成できない場合はNone）"""
    try:
        from google.cloud import logging as cloud_logging

        client = cloud_logging.Client(project=project_id)
        handler = cloud_logging.handlers.CloudLoggingHandler(client, name="tripgo")
    except Exception as e:
        logging.warning(f"Failed to enable Cloud Logging: {e}")
        return None

    handler.setLevel(level)
    return handler


def setup_logging(
    level: str = "INFO",
    enable_cloud_logging: bool = False,
    project_id: Optional[str] = None,
) -> None:
    """
    ルートロガーを設定（HTTPサーバーとCLIで共通、2回目以降の呼び出しは無視）

    Args:
        level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_cloud_logging: Cloud Loggingにも送るか（Cloud Run向け）
        project_id: GCPプロジェクトID
    """
    global _logger_configured

    if _logger_configured:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(log_level))

    if enable_cloud_logging:
        cloud_handler = _cloud_handler(log_level, project_id)
        if cloud_handler:
            root_logger.addHandler(cloud_handler)
            logging.info("Cloud Logging enabled")

    # DEBUGの場合は依存ライブラリのログも出す
    if log_level > logging.DEBUG:
        for name, quiet_level in QUIET_LOGGERS.items():
            logging.getLogger(name).setLevel(quiet_level)

    _logger_configured = True
    logging.info(f"Logging configured with level: {level}")


def get_logger(name: str) -> logging.Logger:
    """モジュール用のロガーを取得（通常は__name__を指定）"""
    return logging.getLogger(name)
