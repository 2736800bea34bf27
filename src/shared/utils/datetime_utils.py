"""日時関連ユーティリティ"""

import math
from datetime import date, datetime, timedelta, timezone

import pytz

# 車両ログ（FBT）はオーストラリアの制度のため既定はシドニー時間
DEFAULT_TIMEZONE = "Australia/Sydney"

ISO_DATE_FORMAT = "%Y-%m-%d"


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """指定タイムゾーンの現在時刻を取得"""
    return datetime.now(pytz.timezone(tz_name))


def now_utc() -> datetime:
    """現在のUTC時間を取得"""
    return datetime.now(timezone.utc)


def seconds_until_next_hour(hour: int, now: datetime) -> int:
    """
    次に時計が hour:00:00 になるまでの秒数（切り捨て）

    現在時刻がちょうど hour:00:00 以降なら翌日の同時刻を対象とする。
    pytzのタイムゾーン付きdatetimeの場合は、夏時間の切り替えを
    考慮して対象時刻を改めてローカライズする。

    Args:
        hour: 対象の時（0-23）
        now: 基準時刻

    Returns:
        int: 秒数（0以上）
    """
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if now >= target:
        target = target + timedelta(days=1)

    zone = getattr(now.tzinfo, "zone", None)
    if zone:
        target = pytz.timezone(zone).localize(target.replace(tzinfo=None))

    return math.floor((target - now).total_seconds())


def fbt_year_ending(today: date) -> int:
    """エクスポート行に記載するFBT年度（当年+1）"""
    return today.year + 1


def parse_iso_date(value: str) -> date:
    """
    YYYY-MM-DD形式の文字列を日付に変換

    Raises:
        ValueError: 形式が不正な場合
    """
    return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()


def format_duration(seconds: float) -> str:
    """
    秒数を読みやすい形式に変換

    Returns:
        "7 hours and 5 minutes" のような文字列
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours} hours and {minutes} minutes"
