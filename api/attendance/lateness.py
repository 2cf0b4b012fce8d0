# api/attendance/lateness.py
"""
Local-day and cutoff arithmetic shared by the check-in path and the reports.

Every comparison between a check-in instant and a window cutoff goes through
this module so that the status stored at write time and the status derived
when reporting can never disagree.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from api.attendance.attendance_records_model import AttendanceStatus
from config.settings import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_local(instant: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    return ensure_utc(instant).astimezone(tz or settings.local_zone)


def local_day(instant: datetime, tz: Optional[ZoneInfo] = None) -> date:
    return to_local(instant, tz).date()


def local_time_of_day(instant: datetime, tz: Optional[ZoneInfo] = None) -> time:
    return to_local(instant, tz).time()


def effective_cutoff(cutoff: Optional[time]) -> time:
    return cutoff if cutoff is not None else settings.default_cutoff


def is_late(instant: datetime, cutoff: Optional[time], tz: Optional[ZoneInfo] = None) -> bool:
    """Strictly after the cutoff is late; exactly at the cutoff is punctual."""
    return local_time_of_day(instant, tz) > effective_cutoff(cutoff)


def status_for(instant: datetime, cutoff: Optional[time], tz: Optional[ZoneInfo] = None) -> AttendanceStatus:
    return AttendanceStatus.late if is_late(instant, cutoff, tz) else AttendanceStatus.punctual


def resolve_status(
    stored: Optional[AttendanceStatus],
    instant: datetime,
    cutoff: Optional[time],
    tz: Optional[ZoneInfo] = None,
) -> AttendanceStatus:
    """Status as recorded; rows written without one are derived the same way the write path does."""
    if stored is not None:
        return AttendanceStatus(stored)
    return status_for(instant, cutoff, tz)
