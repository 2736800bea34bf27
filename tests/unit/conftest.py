"""テスト用のフィクスチャ（インメモリFirestore、スタブジオコーダー）"""

import copy
import operator
from collections import defaultdict
from typing import Any, Callable, Optional

import pytest
from fastapi.testclient import TestClient

from src.features.auth.services.auth_service import AuthService
from src.features.auth.services.password_hasher import PasswordHasher
from src.features.auth.services.token_service import TokenService
from src.features.export.services.export_service import ExportService
from src.features.export.services.vehicle_log_writer import VehicleLogWriter
from src.features.geocoding.domain.models import GeoLocation
from src.features.geocoding.services.area_service import AreaService
from src.features.storage.repositories.active_trip_repository import ActiveTripRepository
from src.features.storage.repositories.trip_repository import TripRepository
from src.features.storage.repositories.user_data_repository import UserDataRepository
from src.features.storage.repositories.user_repository import UserRepository
from src.features.trips.services.trip_service import TripService
from src.infrastructure.config.settings import Settings
from src.infrastructure.container import AppContainer
from src.server import create_app
from src.shared.exceptions.errors import DuplicateError, StorageError

JWT_SECRET = "test-secret"

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class FakeSnapshot:
    def __init__(self, data: Optional[dict[str, Any]]) -> None:
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, client: "FakeFirestoreClient", collection: str, document_id: str) -> None:
        self.client = client
        self.collection = collection
        self.document_id = document_id

    def get(self, transaction: Any = None) -> FakeSnapshot:
        return FakeSnapshot(self.client.collections[self.collection].get(self.document_id))


class FakeTransaction:
    def __init__(self, client: "FakeFirestoreClient") -> None:
        self.client = client

    def set(self, ref: FakeDocumentRef, data: dict[str, Any], merge: bool = False) -> None:
        self.client.set_document(ref.collection, ref.document_id, data, merge=merge)

    def update(self, ref: FakeDocumentRef, updates: dict[str, Any]) -> None:
        self.client.update_document(ref.collection, ref.document_id, updates)

    def delete(self, ref: FakeDocumentRef) -> None:
        self.client.delete_document(ref.collection, ref.document_id)


class FakeFirestoreClient:
    """FirestoreClientと同じインターフェースのインメモリ実装"""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)

    def document(self, collection_path: str, document_id: str) -> FakeDocumentRef:
        return FakeDocumentRef(self, collection_path, document_id)

    def get_document(self, collection_path: str, document_id: str) -> Optional[dict[str, Any]]:
        data = self.collections[collection_path].get(document_id)
        return copy.deepcopy(data) if data is not None else None

    def set_document(
        self,
        collection_path: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        collection = self.collections[collection_path]
        if merge and document_id in collection:
            collection[document_id].update(copy.deepcopy(data))
        else:
            collection[document_id] = copy.deepcopy(data)

    def create_document(
        self, collection_path: str, document_id: str, data: dict[str, Any]
    ) -> None:
        collection = self.collections[collection_path]
        if document_id in collection:
            raise DuplicateError(f"Document {document_id} already exists in {collection_path}")
        collection[document_id] = copy.deepcopy(data)

    def query_documents(
        self,
        collection_path: str,
        filters: Optional[list[tuple[str, str, Any]]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        results = []
        for data in self.collections[collection_path].values():
            if all(
                field in data and _OPERATORS[op](data[field], value)
                for field, op, value in filters or []
            ):
                results.append(copy.deepcopy(data))
        return results[:limit] if limit else results

    def delete_document(self, collection_path: str, document_id: str) -> None:
        self.collections[collection_path].pop(document_id, None)

    def update_document(
        self, collection_path: str, document_id: str, updates: dict[str, Any]
    ) -> None:
        collection = self.collections[collection_path]
        if document_id not in collection:
            raise StorageError(f"No document to update: {document_id}")
        collection[document_id].update(copy.deepcopy(updates))

    def run_transaction(self, callback: Callable[[FakeTransaction], Any]) -> Any:
        return callback(FakeTransaction(self))


class StubGeocoder:
    """座標ごとのエリア名を返すジオコーダー（未登録の座標はNone）"""

    def __init__(self, areas: Optional[dict[tuple[float, float], str]] = None) -> None:
        self.areas = areas or {}
        self.calls: list[tuple[float, float]] = []

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        self.calls.append((latitude, longitude))
        area = self.areas.get((latitude, longitude))
        if area is None:
            return None
        return GeoLocation(latitude=latitude, longitude=longitude, area=area)


SYDNEY = (-33.8688, 151.2093)
PARRAMATTA = (-33.8150, 151.0011)


@pytest.fixture
def firestore_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()


@pytest.fixture
def geocoder() -> StubGeocoder:
    return StubGeocoder({SYDNEY: "Sydney", PARRAMATTA: "Parramatta"})


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        gcp_project_id="test-project",
        jwt_secret=JWT_SECRET,
        vehicle_log_path=str(tmp_path / "Motor_Vehicle_Log.csv"),
        max_route_points=5,
    )


@pytest.fixture
def user_repository(firestore_client: FakeFirestoreClient) -> UserRepository:
    return UserRepository(firestore_client)


@pytest.fixture
def user_data_repository(firestore_client: FakeFirestoreClient) -> UserDataRepository:
    return UserDataRepository(firestore_client)


@pytest.fixture
def trip_repository(firestore_client: FakeFirestoreClient) -> TripRepository:
    return TripRepository(firestore_client)


@pytest.fixture
def active_trip_repository(firestore_client: FakeFirestoreClient) -> ActiveTripRepository:
    return ActiveTripRepository(firestore_client)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=JWT_SECRET)


@pytest.fixture
def auth_service(
    user_repository: UserRepository,
    user_data_repository: UserDataRepository,
    token_service: TokenService,
) -> AuthService:
    # テストを速くするためbcryptの最小コスト
    return AuthService(
        user_repository=user_repository,
        user_data_repository=user_data_repository,
        password_hasher=PasswordHasher(rounds=4),
        token_service=token_service,
    )


@pytest.fixture
def area_service(geocoder: StubGeocoder) -> AreaService:
    return AreaService(geocoder)


@pytest.fixture
def trip_service(
    settings: Settings,
    user_repository: UserRepository,
    user_data_repository: UserDataRepository,
    active_trip_repository: ActiveTripRepository,
    trip_repository: TripRepository,
    area_service: AreaService,
) -> TripService:
    return TripService(
        user_repository=user_repository,
        user_data_repository=user_data_repository,
        active_trip_repository=active_trip_repository,
        trip_repository=trip_repository,
        area_service=area_service,
        vehicle_log_writer=VehicleLogWriter(settings.vehicle_log_path),
        max_route_points=settings.max_route_points,
    )


@pytest.fixture
def export_service(
    trip_repository: TripRepository, user_repository: UserRepository
) -> ExportService:
    return ExportService(trip_repository, user_repository)


@pytest.fixture
def container(
    settings: Settings,
    auth_service: AuthService,
    trip_service: TripService,
    export_service: ExportService,
    area_service: AreaService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        auth_service=auth_service,
        trip_service=trip_service,
        export_service=export_service,
        area_service=area_service,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container=container))
