# api/attendance/attendance_routes.py

from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from api.attendance.attendance_schema import AttendanceIn, AttendanceMarkOut, AttendanceRecordOut
from api.attendance.attendance_controller import AttendanceController
from api.uploads.uploads_service import FileStorage
from utils.deps import get_clock, get_photo_storage

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post(
    "/mark",
    response_model=AttendanceMarkOut,
    status_code=status.HTTP_201_CREATED,
    summary="Check in with a scanned QR token",
)
def mark(
    payload: AttendanceIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AttendanceMarkOut:
    return AttendanceController.mark(payload, db, current_user["id"], clock)


@router.post(
    "/mark-with-photo",
    response_model=AttendanceMarkOut,
    status_code=status.HTTP_201_CREATED,
    summary="Check in with a scanned QR token and a photo",
)
async def mark_with_photo(
    qr_token: str = Form(..., min_length=1),
    justification_text: Optional[str] = Form(None, max_length=1000),
    photo: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
    clock: Callable[[], datetime] = Depends(get_clock),
    storage: FileStorage = Depends(get_photo_storage),
) -> AttendanceMarkOut:
    return await AttendanceController.mark_with_photo(
        qr_token, justification_text, photo, db, current_user["id"], clock, storage
    )


@router.get(
    "/me",
    response_model=List[AttendanceRecordOut],
    summary="List my own attendance records",
)
def list_my_records(
    limit: int = Query(60, description="Clamped to 1..500"),
    day_from: Optional[date] = Query(None, alias="from"),
    day_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> List[AttendanceRecordOut]:
    return AttendanceController.list_user_records(current_user["id"], db, clock, limit, day_from, day_to)
