#!/usr/bin/env python3
"""ローカル開発用のサーバー起動スクリプト"""
import argparse
import sys
from pathlib import Path

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from src.infrastructure.config.settings import Settings
from src.server import create_app
from src.shared.logging.config import get_logger, setup_logging


def main():
    """メイン関数"""
    parser = argparse.ArgumentParser(description="TripGo サーバー（ローカル開発用）")
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="ポート番号（デフォルト: 設定値）",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="デバッグモードで実行",
    )

    args = parser.parse_args()

    # 設定を読み込み
    settings = Settings()

    # ロギングを設定
    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level)
    logger = get_logger(__name__)

    port = args.port or settings.port

    logger.info("=" * 80)
    logger.info("TripGo サーバー（ローカル開発用）")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Port: {port}")
    logger.info(f"Geocoding: {settings.geocoding_provider if settings.geocoding_enabled else 'disabled'}")
    logger.info(f"Firestore Emulator: {settings.firestore_emulator_host or 'Not set (using production)'}")
    logger.info("=" * 80)

    try:
        uvicorn.run(create_app(settings), host="127.0.0.1", port=port, log_level=log_level.lower())
    except KeyboardInterrupt:
        logger.warning("\n\nServer interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
