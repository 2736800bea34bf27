"""FirestoreClientのテスト（firestore.Clientはモック）"""

from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from src.features.storage.clients.firestore_client import FirestoreClient
from src.shared.exceptions.errors import DuplicateError, StorageError, TripStateError


@pytest.fixture
def mock_client():
    with patch("src.features.storage.clients.firestore_client.firestore.Client") as client_class:
        yield client_class.return_value


def test_get_document(mock_client: MagicMock) -> None:
    snapshot = MagicMock(exists=True)
    snapshot.to_dict.return_value = {"user_id": "driver@example.com"}
    mock_client.collection.return_value.document.return_value.get.return_value = snapshot

    client = FirestoreClient("test-project")

    assert client.get_document("user_data", "driver@example.com") == {"user_id": "driver@example.com"}
    mock_client.collection.assert_called_with("user_data")


def test_get_missing_document(mock_client: MagicMock) -> None:
    mock_client.collection.return_value.document.return_value.get.return_value = MagicMock(exists=False)

    assert FirestoreClient("test-project").get_document("users", "nobody") is None


def test_create_document_already_exists(mock_client: MagicMock) -> None:
    mock_client.collection.return_value.document.return_value.create.side_effect = (
        google_exceptions.AlreadyExists("exists")
    )

    with pytest.raises(DuplicateError):
        FirestoreClient("test-project").create_document("active_trips", "driver@example.com", {})


def test_set_document_failure(mock_client: MagicMock) -> None:
    mock_client.collection.return_value.document.return_value.set.side_effect = RuntimeError("down")

    with pytest.raises(StorageError):
        FirestoreClient("test-project").set_document("user_data", "driver@example.com", {})


def test_query_documents_applies_filters(mock_client: MagicMock) -> None:
    collection = mock_client.collection.return_value
    query = collection.where.return_value
    query.where.return_value = query
    doc = MagicMock(exists=True)
    doc.to_dict.return_value = {"trip_id": "t1"}
    query.stream.return_value = [doc]

    docs = FirestoreClient("test-project").query_documents(
        "trips",
        filters=[("user_id", "==", "driver@example.com"), ("start_date", ">=", "2024-07-01")],
    )

    assert docs == [{"trip_id": "t1"}]
    assert collection.where.call_count == 1
    assert query.where.call_count == 1


def test_query_documents_failure(mock_client: MagicMock) -> None:
    mock_client.collection.return_value.stream.side_effect = RuntimeError("down")

    with pytest.raises(StorageError):
        FirestoreClient("test-project").query_documents("trips")


def test_run_transaction_propagates_application_errors(mock_client: MagicMock) -> None:
    client = FirestoreClient("test-project")

    with patch(
        "src.features.storage.clients.firestore_client.firestore.transactional",
        side_effect=lambda func: func,
    ):
        assert client.run_transaction(lambda tx: "done") == "done"

        def fail(tx):
            raise TripStateError("No active trip found")

        with pytest.raises(TripStateError):
            client.run_transaction(fail)

        def crash(tx):
            raise RuntimeError("aborted")

        with pytest.raises(StorageError):
            client.run_transaction(crash)
