"""アプリケーション設定（Pydantic Settings）"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = Field(
        default="tripgo-trip-logger",
        description="プロジェクト名",
    )
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )

    # GCP
    gcp_project_id: str = Field(
        ...,
        description="GCPプロジェクトID",
    )

    # Firestore
    firestore_database_id: str = Field(
        default="(default)",
        description="FirestoreデータベースID",
    )
    firestore_emulator_host: Optional[str] = Field(
        default=None,
        description="Firestoreエミュレータのホスト（例: localhost:8080）。設定された場合はエミュレータに接続",
    )

    # Auth
    jwt_secret: Optional[str] = Field(
        default=None,
        description="JWT署名用シークレット（ローカル開発用）",
    )
    jwt_secret_secret_name: str = Field(
        default="tripgo-jwt-secret",
        description="JWTシークレットのSecret Manager名",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT署名アルゴリズム",
    )
    token_expiry_hour: int = Field(
        default=1,
        ge=0,
        le=23,
        description="トークンが失効する時刻（ローカル時間の時）",
    )
    timezone: str = Field(
        default="Australia/Sydney",
        description="トークン失効時刻の計算に使うタイムゾーン",
    )
    session_cookie_name: str = Field(
        default="tripgo_token",
        description="トークンを保存するCookie名",
    )
    session_cookie_max_age: int = Field(
        default=24 * 60 * 60,
        description="Cookieの有効期間（秒）",
    )
    password_hash_rounds: int = Field(
        default=10,
        description="bcryptのコストファクター",
    )

    # Geocoding
    geocoding_enabled: bool = Field(
        default=True,
        description="逆ジオコーディングを有効にするか",
    )
    geocoding_provider: str = Field(
        default="nominatim",
        description="逆ジオコーディングのプロバイダー (nominatim, google)",
    )
    geocoding_cache_enabled: bool = Field(
        default=True,
        description="逆ジオコーディングキャッシュを有効にするか",
    )
    geocoding_cache_size: int = Field(
        default=5000,
        description="キャッシュに保持する座標数の上限",
    )
    geocoding_timeout: float = Field(
        default=15.0,
        description="逆ジオコーディングのタイムアウト（秒）",
    )
    geocoding_min_interval: float = Field(
        default=1.1,
        description="Nominatimへのリクエスト間隔（秒）",
    )
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="NominatimのベースURL",
    )
    geocoding_user_agent: str = Field(
        default="TripGo-App/1.0 (trip-tracking-application)",
        description="逆ジオコーディングのUser-Agent",
    )
    geocoding_language: Optional[str] = Field(
        default="en",
        description="エリア名の言語（Accept-Language）",
    )
    google_maps_api_key_secret_name: str = Field(
        default="google-maps-api-key",
        description="Google Maps API KeyのSecret Manager名",
    )
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API Key（ローカル開発用）",
    )

    # Trips
    max_route_points: int = Field(
        default=1000,
        description="進行中トリップに保持するGPSポイントの上限",
    )

    # Export
    vehicle_log_path: str = Field(
        default="Motor_Vehicle_Log.csv",
        description="トリップ終了時に追記する車両ログCSVのパス",
    )

    # HTTP
    cors_allow_origins: str = Field(
        default="*",
        description="CORSで許可するオリジン（カンマ区切り）",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    gcp_logging_enabled: bool = Field(
        default=False,
        description="Cloud Loggingを有効にするか",
    )

    # Cloud Run
    port: int = Field(
        default=8080,
        description="HTTPサーバーのポート番号",
    )

    def get_cors_origins(self) -> list[str]:
        """CORSで許可するオリジンのリストを取得"""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """本番環境かどうか"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """開発環境かどうか"""
        return self.environment.lower() == "development"
