"""車両ログエクスポートのテスト"""

import csv
import io
from datetime import date, datetime, timezone

import pytest

from src.features.auth.domain.models import User
from src.features.distance.domain.enums import DistanceSource
from src.features.export.domain.models import VEHICLE_LOG_HEADER, VehicleLogRow
from src.features.export.services.export_service import ExportService
from src.features.export.services.vehicle_log_writer import VehicleLogWriter, render_csv
from src.features.storage.repositories.user_repository import UserRepository
from src.features.trips.domain.models import Trip
from src.shared.exceptions.errors import ExportError, NotFoundError, ValidationError

USER_ID = "driver@example.com"


def make_trip(trip_id: str, start_date: str, user_id: str = USER_ID, **overrides) -> Trip:
    start_time = datetime.fromisoformat(f"{start_date}T09:00:00+00:00")
    values = dict(
        trip_id=trip_id,
        user_id=user_id,
        purpose="Client visit",
        start_date=start_date,
        end_date=start_date,
        start_odometer=1000.0,
        end_odometer=1012.0,
        total_distance=12.0,
        distance_source=DistanceSource.GPS,
        start_latitude=-33.8688,
        start_longitude=151.2093,
        end_latitude=-33.8150,
        end_longitude=151.0011,
        start_time=start_time,
        end_time=start_time,
        start_area="Sydney",
        end_area="Parramatta",
    )
    values.update(overrides)
    return Trip(**values)


def save(firestore_client, *trips: Trip) -> None:
    for trip in trips:
        firestore_client.set_document("trips", trip.trip_id, trip.to_firestore_dict())


def read_rows(text: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(text)))


def test_header_has_twelve_columns() -> None:
    assert len(VEHICLE_LOG_HEADER) == 12
    assert VEHICLE_LOG_HEADER[0] == "Date Trip Began"
    assert VEHICLE_LOG_HEADER[-1] == "Date of Entry"


def test_row_from_trip() -> None:
    row = VehicleLogRow.from_trip(
        make_trip("t1", "2024-07-01", start_area=""),
        driver_name="Jane Driver",
        fbt_year=2025,
        date_of_entry=date(2024, 7, 2),
    )

    values = row.to_csv_dict()

    assert values["Area From"] == "Unknown Area"
    assert values["Odometer Reading Start"] == 1000
    assert values["Kilometres Travelled"] == 12
    assert values["Signature of person making Entry"] == ""
    assert values["Name of Driver or Vehicle Registration No"] == "Jane Driver"
    assert values["FBT Year Ending"] == 2025
    assert values["Date of Entry"] == "2024-07-02"


def test_render_csv_quotes_commas() -> None:
    row = VehicleLogRow.from_trip(
        make_trip("t1", "2024-07-01", purpose="Meeting, then lunch"),
        driver_name="Jane",
        fbt_year=2025,
        date_of_entry=date(2024, 7, 1),
    )

    text = render_csv([row])

    assert '"Meeting, then lunch"' in text
    assert read_rows(text)[0]["Purpose of Trip"] == "Meeting, then lunch"


class TestVehicleLogWriter:
    """VehicleLogWriterのテスト"""

    def make_row(self, purpose: str) -> VehicleLogRow:
        return VehicleLogRow.from_trip(
            make_trip("t1", "2024-07-01", purpose=purpose),
            driver_name="Jane",
            fbt_year=2025,
            date_of_entry=date(2024, 7, 1),
        )

    def test_header_written_once(self, tmp_path) -> None:
        path = tmp_path / "logs" / "vehicle_log.csv"
        writer = VehicleLogWriter(str(path))

        writer.append(self.make_row("First"))
        writer.append(self.make_row("Second"))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("Date Trip Began,")
        assert len(lines) == 3
        assert [row["Purpose of Trip"] for row in read_rows(path.read_text(encoding="utf-8"))] == [
            "First",
            "Second",
        ]

    def test_write_failure(self, tmp_path) -> None:
        # ディレクトリをファイルとして開こうとする
        writer = VehicleLogWriter(str(tmp_path))

        with pytest.raises(ExportError):
            writer.append(self.make_row("First"))


class TestExportService:
    """ExportServiceのテスト"""

    def test_export_range(
        self, export_service: ExportService, firestore_client, user_repository: UserRepository
    ) -> None:
        user_repository.create(User(email=USER_ID, password_hash="x", full_name="Jane Driver"))
        save(
            firestore_client,
            make_trip("t3", "2024-07-10"),
            make_trip("t1", "2024-06-30"),
            make_trip("t2", "2024-07-01"),
            make_trip("t4", "2024-07-31"),
            make_trip("t5", "2024-08-01"),
            make_trip("other", "2024-07-05", user_id="other@example.com"),
        )

        filename, text = export_service.export_range(USER_ID, "2024-07-01", "2024-07-31")

        assert filename == "Motor_Vehicle_Log_20240701_to_20240731.csv"
        rows = read_rows(text)
        assert [row["Date Trip Began"] for row in rows] == [
            "2024-07-01",
            "2024-07-10",
            "2024-07-31",
        ]
        assert rows[0]["Name of Driver or Vehicle Registration No"] == "Jane Driver"
        assert rows[0]["Date of Entry"] == "2024-07-01"

    def test_range_query_uses_equality_filter_only(
        self, export_service: ExportService, firestore_client, monkeypatch
    ) -> None:
        """範囲条件はクエリに含めない（複合インデックスなしで動くこと）"""
        save(firestore_client, make_trip("t1", "2024-07-02"), make_trip("t2", "2024-09-01"))
        queries = []
        query_documents = firestore_client.query_documents

        def recording_query(collection_path, filters=None, limit=None):
            queries.append((collection_path, filters))
            return query_documents(collection_path, filters=filters, limit=limit)

        monkeypatch.setattr(firestore_client, "query_documents", recording_query)

        _, text = export_service.export_range(USER_ID, "2024-07-01", "2024-07-31")

        assert queries == [("trips", [("user_id", "==", USER_ID)])]
        assert [row["Date Trip Began"] for row in read_rows(text)] == ["2024-07-02"]

    def test_single_day_range(self, export_service: ExportService, firestore_client) -> None:
        save(firestore_client, make_trip("t1", "2024-07-01"))

        _, text = export_service.export_range(USER_ID, "2024-07-01", "2024-07-01")

        assert len(read_rows(text)) == 1

    def test_no_trips(self, export_service: ExportService) -> None:
        with pytest.raises(NotFoundError, match="No trips found in the specified date range"):
            export_service.export_range(USER_ID, "2024-07-01", "2024-07-31")

    @pytest.mark.parametrize(
        "start_date,end_date,message",
        [
            (None, "2024-07-31", "Start date and end date are required"),
            ("2024-07-01", "", "Start date and end date are required"),
            ("01/07/2024", "2024-07-31", "Invalid date format"),
            ("2024-08-01", "2024-07-31", "Start date must be before or equal to end date"),
        ],
    )
    def test_validation(
        self, export_service: ExportService, start_date, end_date, message
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            export_service.export_range(USER_ID, start_date, end_date)

        assert str(exc_info.value) == message
