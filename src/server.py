"""Cloud Run用HTTPサーバー（FastAPI）"""
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import router
from .infrastructure.config.settings import Settings
from .infrastructure.container import AppContainer
from .shared.exceptions.errors import (
    AuthenticationError,
    DuplicateError,
    InvalidTokenError,
    NotFoundError,
    TripLogError,
    TripStateError,
    ValidationError,
)
from .shared.logging.config import get_logger, setup_logging
from .shared.utils.datetime_utils import now_utc

logger = get_logger(__name__)

SERVICE_NAME = "TripGo 走行記録サービス"
SERVICE_VERSION = "1.0.0"

# 先に一致したものを使う（InvalidTokenErrorはAuthenticationErrorのサブクラス）
ERROR_STATUS_CODES: list[tuple[type[TripLogError], int]] = [
    (InvalidTokenError, 403),
    (AuthenticationError, 401),
    (ValidationError, 400),
    (DuplicateError, 400),
    (TripStateError, 400),
    (NotFoundError, 404),
]


def error_status_code(exc: TripLogError) -> Optional[int]:
    """アプリケーション例外に対応するHTTPステータス（内部エラーの場合はNone）"""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return None


def create_app(
    settings: Optional[Settings] = None, container: Optional[AppContainer] = None
) -> FastAPI:
    """
    FastAPIアプリケーションを作成

    Args:
        settings: 設定（Noneの場合は環境変数から読み込み）
        container: サービス群（Noneの場合は起動時に設定から組み立てる）

    Returns:
        FastAPI: アプリケーション
    """
    if settings is None:
        settings = container.settings if container else Settings()

    setup_logging(
        level=settings.log_level,
        enable_cloud_logging=settings.gcp_logging_enabled,
        project_id=settings.gcp_project_id,
    )

    app = FastAPI(
        title=SERVICE_NAME,
        description="業務用車両の走行を記録し、税務用の車両ログを出力するサービス",
        version=SERVICE_VERSION,
    )
    app.state.settings = settings
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.on_event("startup")
    async def startup_event() -> None:
        """起動時の処理"""
        logger.info("Application starting up")
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Project: {settings.project_name}")

        if app.state.container is None:
            app.state.container = AppContainer.from_settings(settings)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        """シャットダウン時の処理"""
        logger.info("Application shutting down")

    @app.get("/")
    async def root() -> dict[str, Any]:
        """ルートエンドポイント"""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "status": "running",
            "environment": settings.environment,
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        """ヘルスチェックエンドポイント"""
        return {"status": "OK", "timestamp": now_utc().isoformat()}

    @app.exception_handler(TripLogError)
    async def trip_log_exception_handler(request: Request, exc: TripLogError) -> JSONResponse:
        """アプリケーション例外をステータスコードに変換"""
        status_code = error_status_code(exc)

        if status_code is None:
            logger.error(f"Request failed: {request.method} {request.url.path}: {exc}", exc_info=True)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        if 401 <= status_code <= 403:
            logger.info(f"Rejected {request.method} {request.url.path}: {exc}")

        message = "Invalid token" if isinstance(exc, InvalidTokenError) else str(exc)
        return JSONResponse(status_code=status_code, content={"error": message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """リクエストボディの型エラー"""
        details = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400, content={"error": "Invalid request", "details": details}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """グローバル例外ハンドラー"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return app


if __name__ == "__main__":
    import uvicorn

    server_settings = Settings()
    uvicorn.run(
        create_app(server_settings),
        host="0.0.0.0",
        port=server_settings.port,
        log_level=server_settings.log_level.lower(),
    )
