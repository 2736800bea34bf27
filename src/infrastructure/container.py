"""依存関係の組み立て"""

import os
from dataclasses import dataclass
from typing import Optional

from ..features.auth.services.auth_service import AuthService
from ..features.auth.services.password_hasher import PasswordHasher
from ..features.auth.services.token_service import TokenService
from ..features.export.services.export_service import ExportService
from ..features.export.services.vehicle_log_writer import VehicleLogWriter
from ..features.geocoding.providers.cache_geocoder import CacheGeocoder, ReverseGeocoder
from ..features.geocoding.providers.google_maps_geocoder import GoogleMapsGeocoder
from ..features.geocoding.providers.nominatim_geocoder import NominatimGeocoder
from ..features.geocoding.services.area_service import AreaService
from ..features.storage.clients.firestore_client import FirestoreClient
from ..features.storage.repositories.active_trip_repository import ActiveTripRepository
from ..features.storage.repositories.trip_repository import TripRepository
from ..features.storage.repositories.user_data_repository import UserDataRepository
from ..features.storage.repositories.user_repository import UserRepository
from ..features.trips.services.trip_service import TripService
from ..shared.exceptions.errors import ConfigurationError
from ..shared.http.client import HTTPClient
from ..shared.http.rate_limiter import RateLimiter
from ..shared.logging.config import get_logger
from .config.settings import Settings
from .gcp.secret_manager import SecretManagerClient

logger = get_logger(__name__)


@dataclass
class AppContainer:
    """
    アプリケーションのサービス群

    HTTPサーバーとCLIの両方から使う。テストでは各サービスを
    差し替えたコンテナを直接生成する。
    """

    settings: Settings
    auth_service: AuthService
    trip_service: TripService
    export_service: ExportService
    area_service: AreaService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContainer":
        """
        設定から本番用の依存関係を組み立てる

        Raises:
            ConfigurationError: 必須のシークレットが取得できない場合
        """
        if settings.firestore_emulator_host:
            os.environ["FIRESTORE_EMULATOR_HOST"] = settings.firestore_emulator_host

        secret_manager: Optional[SecretManagerClient] = None
        if not settings.is_development:
            secret_manager = SecretManagerClient(settings.gcp_project_id)

        firestore_client = FirestoreClient(
            project_id=settings.gcp_project_id,
            database_id=settings.firestore_database_id,
        )

        user_repository = UserRepository(firestore_client)
        user_data_repository = UserDataRepository(firestore_client)
        active_trip_repository = ActiveTripRepository(firestore_client)
        trip_repository = TripRepository(firestore_client)

        token_service = TokenService(
            secret=_resolve_jwt_secret(settings, secret_manager),
            algorithm=settings.jwt_algorithm,
            expiry_hour=settings.token_expiry_hour,
            timezone=settings.timezone,
        )
        auth_service = AuthService(
            user_repository=user_repository,
            user_data_repository=user_data_repository,
            password_hasher=PasswordHasher(rounds=settings.password_hash_rounds),
            token_service=token_service,
        )

        area_service = AreaService(_create_geocoder(settings, secret_manager))

        trip_service = TripService(
            user_repository=user_repository,
            user_data_repository=user_data_repository,
            active_trip_repository=active_trip_repository,
            trip_repository=trip_repository,
            area_service=area_service,
            vehicle_log_writer=VehicleLogWriter(settings.vehicle_log_path),
            max_route_points=settings.max_route_points,
        )
        export_service = ExportService(trip_repository, user_repository)

        logger.info("AppContainer initialized")

        return cls(
            settings=settings,
            auth_service=auth_service,
            trip_service=trip_service,
            export_service=export_service,
            area_service=area_service,
        )


def _resolve_jwt_secret(
    settings: Settings, secret_manager: Optional[SecretManagerClient]
) -> str:
    """JWTシークレットを取得（環境変数を優先し、なければSecret Manager）"""
    if settings.jwt_secret:
        return settings.jwt_secret

    if secret_manager:
        return secret_manager.get_secret(settings.jwt_secret_secret_name)

    raise ConfigurationError("JWT_SECRET is not set")


def _create_geocoder(
    settings: Settings, secret_manager: Optional[SecretManagerClient]
) -> Optional[ReverseGeocoder]:
    """設定に応じた逆ジオコーダーを作成（無効な場合はNone）"""
    if not settings.geocoding_enabled:
        logger.info("Reverse geocoding is disabled")
        return None

    provider = settings.geocoding_provider.lower()
    geocoder: ReverseGeocoder

    if provider == "nominatim":
        http_client = HTTPClient(
            timeout=settings.geocoding_timeout,
            user_agent=settings.geocoding_user_agent,
            accept_language=settings.geocoding_language,
        )
        geocoder = NominatimGeocoder(
            http_client=http_client,
            base_url=settings.nominatim_url,
            rate_limiter=RateLimiter(min_interval=settings.geocoding_min_interval),
        )
    elif provider == "google":
        api_key = settings.google_maps_api_key
        if not api_key and secret_manager:
            api_key = secret_manager.get_secret_or_none(
                settings.google_maps_api_key_secret_name
            )
        if not api_key:
            logger.warning("Google Maps API key is not available, reverse geocoding disabled")
            return None
        geocoder = GoogleMapsGeocoder(api_key, timeout=settings.geocoding_timeout)
    else:
        raise ConfigurationError(f"Unknown geocoding provider: {settings.geocoding_provider}")

    if settings.geocoding_cache_enabled:
        return CacheGeocoder(geocoder, max_size=settings.geocoding_cache_size)
    return geocoder
