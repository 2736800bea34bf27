"""期間指定の車両ログエクスポート"""

from typing import Optional

from ....shared.exceptions.errors import NotFoundError, ValidationError
from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import fbt_year_ending, now_utc, parse_iso_date
from ...storage.repositories.trip_repository import TripRepository
from ...storage.repositories.user_repository import UserRepository
from ..domain.models import VehicleLogRow
from .vehicle_log_writer import render_csv

logger = get_logger(__name__)


class ExportService:
    """指定期間のトリップを車両ログCSVとして出力する"""

    def __init__(
        self, trip_repository: TripRepository, user_repository: UserRepository
    ) -> None:
        self.trip_repository = trip_repository
        self.user_repository = user_repository

        logger.info("ExportService initialized")

    def export_range(
        self, user_id: str, start_date: Optional[str], end_date: Optional[str]
    ) -> tuple[str, str]:
        """
        開始日が期間内のトリップをCSVにする

        Args:
            user_id: ユーザーID
            start_date: 期間の開始日（YYYY-MM-DD）
            end_date: 期間の終了日（YYYY-MM-DD、この日を含む）

        Returns:
            tuple[str, str]: (ファイル名, CSVテキスト)

        Raises:
            ValidationError: 日付が不正な場合
            NotFoundError: 該当トリップがない場合
        """
        if not start_date or not end_date:
            raise ValidationError("Start date and end date are required")

        try:
            start = parse_iso_date(start_date)
            end = parse_iso_date(end_date)
        except ValueError as e:
            raise ValidationError("Invalid date format") from e

        if start > end:
            raise ValidationError("Start date must be before or equal to end date")

        trips = self.trip_repository.list_by_user_between(
            user_id, start.isoformat(), end.isoformat()
        )
        if not trips:
            raise NotFoundError("No trips found in the specified date range")

        user = self.user_repository.get_by_email(user_id)
        driver_name = user.full_name if user else ""
        fbt_year = fbt_year_ending(now_utc().date())

        rows = [
            VehicleLogRow.from_trip(
                trip,
                driver_name=driver_name,
                fbt_year=fbt_year,
                date_of_entry=trip.start_time.date(),
            )
            for trip in trips
        ]

        filename = (
            f"Motor_Vehicle_Log_{start.strftime('%Y%m%d')}_to_{end.strftime('%Y%m%d')}.csv"
        )

        logger.info(f"Exported {len(rows)} trips for {user_id}: {filename}")

        return filename, render_csv(rows)
