# api/attendance/attendance_service.py

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.attendance import lateness
from api.attendance.attendance_errors import (
    DuplicateAttendance,
    DuplicatePhoto,
    ExpiredQR,
    InvalidPhoto,
    InvalidQR,
    JustificationRequired,
    StorageFailure,
    Unauthenticated,
)
from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.attendance.late_reason_classifier import classify
from api.qr_windows.qr_windows_model import QRWindow
from api.qr_windows.qr_windows_service import QRWindowService
from api.uploads.uploads_service import FileStorage, InvalidImage, content_hash, validate_image
from api.user.user_model import User
from config.settings import settings
from utils.database_utils import is_unique_violation

logger = logging.getLogger(__name__)

UNIQUE_USER_DAY = "uq_attendance_user_day"


@dataclass
class CheckInResult:
    attendance_id: str
    marked_at: datetime
    status: AttendanceStatus
    photo_url: Optional[str] = None


@dataclass
class _Justification:
    text: Optional[str] = None
    category: Optional[str] = None
    score: Optional[int] = None


class AttendanceService:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = lateness.utc_now,
        tz: Optional[ZoneInfo] = None,
    ):
        self.db = db
        self.clock = clock
        self.tz = tz or settings.local_zone
        self.windows = QRWindowService(db, clock)

    # ─── Check-in ──────────────────────────────────────────────────────────────

    def mark_attendance(
        self,
        user_id: str,
        qr_token: str,
        justification_text: Optional[str] = None,
    ) -> CheckInResult:
        self._require_active_worker(user_id)
        window = self._resolve_window(qr_token)
        now = self.clock()
        self._reject_duplicate(user_id, now)
        justification = self._justify(window, now, justification_text)
        record = self._insert(user_id, window, justification)
        return CheckInResult(record.id, lateness.ensure_utc(record.marked_at), record.status)

    def mark_attendance_with_photo(
        self,
        user_id: str,
        qr_token: str,
        photo: bytes,
        content_type: Optional[str],
        storage: FileStorage,
        justification_text: Optional[str] = None,
    ) -> CheckInResult:
        self._require_active_worker(user_id)
        try:
            validate_image(photo, content_type)
        except InvalidImage as e:
            raise InvalidPhoto(str(e))

        window = self._resolve_window(qr_token)
        now = self.clock()
        sha256 = content_hash(photo)
        # checked before the per-day duplicate so a reused photo is reported as such
        if self._photo_used_on(user_id, sha256, lateness.local_day(now, self.tz)):
            logger.info("Rejected reused photo for user %s", user_id)
            raise DuplicatePhoto()
        self._reject_duplicate(user_id, now)
        justification = self._justify(window, now, justification_text)

        try:
            stored = storage.store(photo, content_type)
        except OSError:
            logger.exception("Could not store check-in photo for user %s", user_id)
            raise StorageFailure()
        try:
            record = self._insert(
                user_id, window, justification,
                photo_url=stored.reference, photo_sha256=stored.content_hash,
            )
        except Exception:
            storage.delete(stored.reference)
            raise
        return CheckInResult(
            record.id, lateness.ensure_utc(record.marked_at), record.status, record.photo_url
        )

    # ─── Decision steps ────────────────────────────────────────────────────────

    def _require_active_worker(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).one_or_none() if user_id else None
        if not user or not user.active:
            raise Unauthenticated()
        return user

    def _resolve_window(self, qr_token: str) -> QRWindow:
        window = self.windows.find_window_by_token((qr_token or "").strip())
        if not window:
            raise InvalidQR()
        if self.windows.is_expired(window):
            raise ExpiredQR()
        return window

    def _reject_duplicate(self, user_id: str, now: datetime) -> None:
        if self.has_attendance_on(user_id, lateness.local_day(now, self.tz)):
            raise DuplicateAttendance()

    def _justify(self, window: QRWindow, now: datetime, text: Optional[str]) -> _Justification:
        text = (text or "").strip() or None
        if not lateness.is_late(now, window.cutoff_time, self.tz):
            return _Justification(text=text)
        if not text:
            raise JustificationRequired()
        reason = classify(text)
        return _Justification(text=text, category=reason.category, score=reason.score)

    def _insert(
        self,
        user_id: str,
        window: QRWindow,
        justification: _Justification,
        photo_url: Optional[str] = None,
        photo_sha256: Optional[str] = None,
    ) -> AttendanceRecord:
        # timestamp, local day and status all come from the same server-side instant
        marked_at = self.clock()
        record = AttendanceRecord(
            user_id=user_id,
            qr_token=window.token,
            marked_at=marked_at,
            local_day=lateness.local_day(marked_at, self.tz),
            status=lateness.status_for(marked_at, window.cutoff_time, self.tz),
            justification_text=justification.text,
            reason_category=justification.category,
            reason_score=justification.score,
            photo_url=photo_url,
            photo_sha256=photo_sha256,
        )
        try:
            self.db.add(record)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e, UNIQUE_USER_DAY, columns=("user_id", "local_day")):
                logger.info("Concurrent duplicate check-in for user %s lost the race", user_id)
                raise DuplicateAttendance()
            logger.exception("Integrity error recording attendance for user %s", user_id)
            raise StorageFailure()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Database error recording attendance for user %s", user_id)
            raise StorageFailure()

        self.db.refresh(record)
        logger.info(
            "Attendance %s recorded for user %s (%s)", record.id, user_id, record.status.value
        )
        return record

    # ─── Ledger queries ────────────────────────────────────────────────────────

    def has_attendance_on(self, user_id: str, day: date) -> bool:
        return self.db.query(
            self.db.query(AttendanceRecord)
            .filter(AttendanceRecord.user_id == user_id, AttendanceRecord.local_day == day)
            .exists()
        ).scalar()

    def _photo_used_on(self, user_id: str, sha256: str, day: date) -> bool:
        return self.db.query(
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.local_day == day,
                AttendanceRecord.photo_sha256 == sha256,
            )
            .exists()
        ).scalar()

    def list_user_records(
        self,
        user_id: str,
        limit: int = 60,
        day_from: Optional[date] = None,
        day_to: Optional[date] = None,
    ) -> List[AttendanceRecord]:
        query = self.db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user_id)
        if day_from:
            query = query.filter(AttendanceRecord.local_day >= day_from)
        if day_to:
            query = query.filter(AttendanceRecord.local_day <= day_to)
        return (
            query.order_by(AttendanceRecord.marked_at.desc())
            .limit(max(1, min(500, limit)))
            .all()
        )

    def marked_today(self, user_ids: List[str]) -> set:
        """Subset of user_ids with a record on the current local day."""
        if not user_ids:
            return set()
        today = lateness.local_day(self.clock(), self.tz)
        rows = (
            self.db.query(AttendanceRecord.user_id)
            .filter(AttendanceRecord.user_id.in_(user_ids), AttendanceRecord.local_day == today)
            .all()
        )
        return {r[0] for r in rows}
