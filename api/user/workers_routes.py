from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import admin_required
from api.attendance.attendance_schema import AttendanceRecordOut
from api.user.user_controller import (
    create_worker_account,
    export_workers,
    get_worker_attendance,
    list_accounts,
    remove_worker,
)
from api.user.user_schema import Message, UserOut, WorkerCreate
from utils.deps import get_clock

router = APIRouter(
    prefix="/users",
    tags=["Workers"],
    dependencies=[Depends(admin_required)],
)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_worker(
    payload: WorkerCreate,
    db: Session = Depends(get_db),
):
    return create_worker_account(payload, db)


@router.get("", response_model=List[UserOut])
def list_workers(
    role: str = Query("WORKER", description="WORKER, ADMIN or ALL (everyone but admins)"),
    q: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return list_accounts(db, role, q, clock)


@router.get("/export", summary="Download workers as CSV")
def export_csv(db: Session = Depends(get_db)):
    return export_workers(db)


@router.delete("/{user_id}", response_model=Message)
def delete_worker(user_id: str, db: Session = Depends(get_db)):
    """Removes a WORKER and its attendance records."""
    return remove_worker(user_id, db)


@router.get("/{user_id}/attendance", response_model=List[AttendanceRecordOut])
def worker_attendance(
    user_id: str,
    limit: int = Query(30, description="Clamped to 1..500"),
    day_from: Optional[date] = Query(None, alias="from"),
    day_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return get_worker_attendance(user_id, db, clock, limit, day_from, day_to)
