"""CLIエントリーポイント"""
import argparse
import sys
from pathlib import Path
from typing import Optional

from .infrastructure.config.settings import Settings
from .infrastructure.container import AppContainer
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数の定義"""
    parser = argparse.ArgumentParser(description="TripGo 走行記録ツール")

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="HTTPサーバーを起動")
    serve.add_argument("--host", type=str, default="0.0.0.0", help="待ち受けアドレス")
    serve.add_argument("--port", type=int, help="ポート番号（デフォルト: 設定値）")

    backfill = subparsers.add_parser(
        "backfill-areas", help="エリア名が未解決のトリップを再度逆ジオコーディング"
    )
    backfill.add_argument(
        "--user",
        type=str,
        help="対象ユーザーのメールアドレス（省略時は全ユーザー）",
    )

    export = subparsers.add_parser("export", help="期間内のトリップを車両ログCSVに出力")
    export.add_argument("--user", type=str, required=True, help="ユーザーのメールアドレス")
    export.add_argument("--start", type=str, required=True, help="開始日（YYYY-MM-DD）")
    export.add_argument("--end", type=str, required=True, help="終了日（YYYY-MM-DD）")
    export.add_argument(
        "--output",
        type=str,
        help="出力ディレクトリまたはファイルパス（デフォルト: カレントディレクトリ）",
    )

    return parser


def run_serve(settings: Settings, host: str, port: int) -> None:
    """HTTPサーバーを起動"""
    import uvicorn

    from .server import create_app

    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def run_backfill(container: AppContainer, user_id: Optional[str] = None) -> None:
    """エリア名の再解決"""
    if not container.area_service.enabled:
        logger.warning("Reverse geocoding is disabled, nothing to do")
        return

    result = container.trip_service.backfill_areas(user_id, show_progress=True)
    logger.info(
        f"Checked {result['totalChecked']} trips, updated {result['updated']} trips"
    )


def run_export(
    container: AppContainer,
    user_id: str,
    start: str,
    end: str,
    output: Optional[str] = None,
) -> Path:
    """車両ログCSVをファイルに書き出す"""
    filename, content = container.export_service.export_range(user_id, start, end)

    path = Path(output) if output else Path.cwd()
    if path.is_dir():
        path = path / filename

    path.write_text(content, encoding="utf-8")
    logger.info(f"Vehicle log written to {path}")
    return path


def main() -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗）
    """
    args = build_parser().parse_args()

    try:
        # 設定を読み込み
        settings = Settings(_env_file=args.env_file)

        # ログレベルを上書き
        if args.log_level:
            settings.log_level = args.log_level

        setup_logging(
            level=settings.log_level,
            enable_cloud_logging=settings.gcp_logging_enabled,
            project_id=settings.gcp_project_id,
        )

        logger.info(f"Running command: {args.command}")
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Project: {settings.project_name}")

        if args.command == "serve":
            run_serve(settings, args.host, args.port or settings.port)
            return 0

        container = AppContainer.from_settings(settings)

        if args.command == "backfill-areas":
            run_backfill(container, args.user)
        elif args.command == "export":
            run_export(container, args.user, args.start, args.end, args.output)

        logger.info("Command completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
