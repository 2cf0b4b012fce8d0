# api/attendance/attendance_controller.py

from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session

from api.attendance.attendance_errors import AttendanceError, StorageFailure
from api.attendance.attendance_service import AttendanceService, CheckInResult
from api.attendance.attendance_schema import (
    AttendanceIn,
    AttendanceMarkOut,
    AttendanceRecordOut,
)
from api.uploads.uploads_service import FileStorage


def _to_http(e: AttendanceError) -> HTTPException:
    if isinstance(e, StorageFailure):
        # internal detail stays in the server log
        return HTTPException(status_code=e.status_code, detail=StorageFailure().to_detail())
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


def _mark_out(result: CheckInResult) -> AttendanceMarkOut:
    return AttendanceMarkOut(
        attendance_id=result.attendance_id,
        marked_at=result.marked_at,
        status=result.status,
        photo_url=result.photo_url,
    )


class AttendanceController:
    @staticmethod
    def mark(
        payload: AttendanceIn,
        db: Session,
        current_user_id: str,
        clock: Callable[[], datetime],
    ) -> AttendanceMarkOut:
        svc = AttendanceService(db, clock)
        try:
            result = svc.mark_attendance(
                user_id=current_user_id,
                qr_token=payload.qr_token,
                justification_text=payload.justification_text,
            )
        except AttendanceError as e:
            raise _to_http(e)
        return _mark_out(result)

    @staticmethod
    async def mark_with_photo(
        qr_token: str,
        justification_text: Optional[str],
        photo: UploadFile,
        db: Session,
        current_user_id: str,
        clock: Callable[[], datetime],
        storage: FileStorage,
    ) -> AttendanceMarkOut:
        data = await photo.read()
        svc = AttendanceService(db, clock)
        try:
            result = svc.mark_attendance_with_photo(
                user_id=current_user_id,
                qr_token=qr_token,
                photo=data,
                content_type=photo.content_type,
                storage=storage,
                justification_text=justification_text,
            )
        except AttendanceError as e:
            raise _to_http(e)
        return _mark_out(result)

    @staticmethod
    def list_user_records(
        user_id: str,
        db: Session,
        clock: Callable[[], datetime],
        limit: int,
        day_from: Optional[date],
        day_to: Optional[date],
    ) -> List[AttendanceRecordOut]:
        svc = AttendanceService(db, clock)
        rows = svc.list_user_records(user_id, limit, day_from, day_to)
        return [AttendanceRecordOut.model_validate(r) for r in rows]
