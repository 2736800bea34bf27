"""設定・依存関係の組み立て・外部サービス連携のテスト"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from src.features.geocoding.providers.cache_geocoder import CacheGeocoder
from src.features.geocoding.providers.nominatim_geocoder import NominatimGeocoder
from src.infrastructure.config.settings import Settings
from src.infrastructure.container import _create_geocoder, _resolve_jwt_secret
from src.infrastructure.gcp.secret_manager import SecretManagerClient
from src.shared.exceptions.errors import ConfigurationError, HTTPError
from src.shared.http.client import HTTPClient
from src.shared.http.rate_limiter import RateLimiter


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, gcp_project_id="test-project", **overrides)


class TestSettings:
    """Settingsのテスト"""

    def test_defaults(self) -> None:
        settings = make_settings()

        assert settings.token_expiry_hour == 1
        assert settings.timezone == "Australia/Sydney"
        assert settings.geocoding_min_interval == 1.1
        assert settings.is_development
        assert not settings.is_production

    def test_cors_origins(self) -> None:
        settings = make_settings(cors_allow_origins="https://a.example, https://b.example,")
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]

    def test_expiry_hour_range(self) -> None:
        with pytest.raises(ValueError):
            make_settings(token_expiry_hour=24)


class TestContainerHelpers:
    """依存関係の組み立てのテスト"""

    def test_jwt_secret_from_settings(self) -> None:
        assert _resolve_jwt_secret(make_settings(jwt_secret="local"), None) == "local"

    def test_jwt_secret_from_secret_manager(self) -> None:
        secret_manager = MagicMock()
        secret_manager.get_secret.return_value = "from-secret-manager"

        assert _resolve_jwt_secret(make_settings(), secret_manager) == "from-secret-manager"
        secret_manager.get_secret.assert_called_once_with("tripgo-jwt-secret")

    def test_jwt_secret_missing(self) -> None:
        with pytest.raises(ConfigurationError):
            _resolve_jwt_secret(make_settings(), None)

    def test_geocoding_disabled(self) -> None:
        assert _create_geocoder(make_settings(geocoding_enabled=False), None) is None

    def test_nominatim_with_cache(self) -> None:
        geocoder = _create_geocoder(make_settings(), None)

        assert isinstance(geocoder, CacheGeocoder)
        assert isinstance(geocoder.geocoder, NominatimGeocoder)

    def test_nominatim_without_cache(self) -> None:
        geocoder = _create_geocoder(make_settings(geocoding_cache_enabled=False), None)
        assert isinstance(geocoder, NominatimGeocoder)

    def test_google_without_key(self) -> None:
        assert _create_geocoder(make_settings(geocoding_provider="google"), None) is None

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError):
            _create_geocoder(make_settings(geocoding_provider="bing"), None)


class TestRateLimiter:
    """RateLimiterのテスト"""

    def test_first_call_does_not_wait(self) -> None:
        with patch("src.shared.http.rate_limiter.time") as mock_time:
            mock_time.monotonic.return_value = 100.0

            assert RateLimiter(min_interval=1.1).wait() == 0.0
            mock_time.sleep.assert_not_called()

    def test_waits_for_remaining_interval(self) -> None:
        with patch("src.shared.http.rate_limiter.time") as mock_time:
            mock_time.monotonic.side_effect = [100.0, 100.4, 101.1]
            limiter = RateLimiter(min_interval=1.0)

            limiter.wait()
            slept = limiter.wait()

            assert slept == pytest.approx(0.6)
            mock_time.sleep.assert_called_once()

    def test_no_wait_after_interval(self) -> None:
        with patch("src.shared.http.rate_limiter.time") as mock_time:
            mock_time.monotonic.side_effect = [100.0, 102.0, 102.0]
            limiter = RateLimiter(min_interval=1.0)

            limiter.wait()

            assert limiter.wait() == 0.0
            mock_time.sleep.assert_not_called()


class TestHTTPClient:
    """HTTPClientのテスト"""

    def test_headers(self) -> None:
        client = HTTPClient(user_agent="TripGo-Test/1.0", accept_language="en")

        assert client.session.headers["User-Agent"] == "TripGo-Test/1.0"
        assert client.session.headers["Accept-Language"] == "en"

    def test_get_json(self) -> None:
        client = HTTPClient()
        response = MagicMock()
        response.json.return_value = {"address": {"city": "Sydney"}}

        with patch.object(client.session, "get", return_value=response) as mock_get:
            assert client.get_json("https://example.com/reverse", params={"lat": 1}) == {
                "address": {"city": "Sydney"}
            }

        mock_get.assert_called_once_with(
            "https://example.com/reverse", params={"lat": 1}, timeout=15
        )

    def test_request_error(self) -> None:
        client = HTTPClient()

        with patch.object(client.session, "get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(HTTPError):
                client.get_json("https://example.com/reverse")

    def test_invalid_json(self) -> None:
        client = HTTPClient()
        response = MagicMock()
        response.json.side_effect = ValueError("not json")

        with patch.object(client.session, "get", return_value=response):
            with pytest.raises(HTTPError, match="Invalid JSON"):
                client.get_json("https://example.com/reverse")


class TestSecretManagerClient:
    """SecretManagerClientのテスト"""

    @pytest.fixture
    def mock_service(self):
        with patch(
            "src.infrastructure.gcp.secret_manager.secretmanager.SecretManagerServiceClient"
        ) as service_class:
            service = service_class.return_value
            service.secret_version_path.side_effect = (
                lambda project, secret, version: f"projects/{project}/secrets/{secret}/versions/{version}"
            )
            yield service

    def test_get_secret_is_cached(self, mock_service: MagicMock) -> None:
        mock_service.access_secret_version.return_value.payload.data = b" signing-key \n"
        client = SecretManagerClient("test-project")

        assert client.get_secret("tripgo-jwt-secret") == "signing-key"
        assert client.get_secret("tripgo-jwt-secret") == "signing-key"

        mock_service.access_secret_version.assert_called_once_with(
            request={"name": "projects/test-project/secrets/tripgo-jwt-secret/versions/latest"}
        )

    def test_empty_secret(self, mock_service: MagicMock) -> None:
        mock_service.access_secret_version.return_value.payload.data = b"  "

        with pytest.raises(ConfigurationError):
            SecretManagerClient("test-project").get_secret("tripgo-jwt-secret")

    def test_get_secret_or_none(self, mock_service: MagicMock) -> None:
        from google.api_core import exceptions as google_exceptions

        mock_service.access_secret_version.side_effect = google_exceptions.NotFound("missing")

        assert SecretManagerClient("test-project").get_secret_or_none("google-maps-api-key") is None
