"""
Attendance reports over a closed range of local days.

A day counts as absent for an active WORKER that has no record on it. Rows
that were stored without a status are classified with the same comparison
the check-in path uses.
"""
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.attendance import lateness
from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.qr_windows.qr_windows_model import QRWindow
from api.reports.reports_schema import DailySummary, UserSummary
from api.user.user_model import User, UserRole
from config.settings import settings

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 366


def validate_range(day_from: date, day_to: date) -> List[date]:
    if day_from > day_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_RANGE", "message": "from must not be after to"},
        )
    span = (day_to - day_from).days + 1
    if span > MAX_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_RANGE", "message": f"Range is limited to {MAX_RANGE_DAYS} days"},
        )
    return [day_from + timedelta(days=i) for i in range(span)]


class ReportsService:
    def __init__(self, db: Session, tz: Optional[ZoneInfo] = None):
        self.db = db
        self.tz = tz or settings.local_zone

    def _active_workers(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == UserRole.WORKER, User.active.is_(True))
            .order_by(User.full_name.asc(), User.email.asc())
            .all()
        )

    def _statuses(self, user_ids: List[str], day_from: date, day_to: date) -> Dict[Tuple[str, date], AttendanceStatus]:
        """(user_id, local_day) -> status for every record in range."""
        if not user_ids:
            return {}
        rows = (
            self.db.query(
                AttendanceRecord.user_id,
                AttendanceRecord.local_day,
                AttendanceRecord.marked_at,
                AttendanceRecord.status,
                QRWindow.cutoff_time,
            )
            .outerjoin(QRWindow, QRWindow.token == AttendanceRecord.qr_token)
            .filter(
                AttendanceRecord.user_id.in_(user_ids),
                AttendanceRecord.local_day >= day_from,
                AttendanceRecord.local_day <= day_to,
            )
            .all()
        )
        return {
            (user_id, day): lateness.resolve_status(stored, marked_at, cutoff, self.tz)
            for user_id, day, marked_at, stored, cutoff in rows
        }

    def daily_summary(self, day_from: date, day_to: date) -> List[DailySummary]:
        days = validate_range(day_from, day_to)
        workers = self._active_workers()
        statuses = self._statuses([w.id for w in workers], day_from, day_to)

        summary = []
        for day in days:
            row = DailySummary(day=day)
            for w in workers:
                st = statuses.get((w.id, day))
                if st is None:
                    row.absent += 1
                elif st == AttendanceStatus.late:
                    row.late += 1
                else:
                    row.punctual += 1
            summary.append(row)
        logger.debug("Daily summary %s..%s over %d workers", day_from, day_to, len(workers))
        return summary

    def by_user(self, day_from: date, day_to: date) -> List[UserSummary]:
        days = validate_range(day_from, day_to)
        workers = self._active_workers()
        statuses = self._statuses([w.id for w in workers], day_from, day_to)

        summary = []
        for w in workers:
            row = UserSummary(user_id=w.id, full_name=w.full_name, email=w.email)
            for day in days:
                st = statuses.get((w.id, day))
                if st is None:
                    row.absent += 1
                elif st == AttendanceStatus.late:
                    row.late += 1
                else:
                    row.punctual += 1
            summary.append(row)
        return summary
