from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import Response
from sqlalchemy.orm import Session

from api.attendance.attendance_controller import AttendanceController
from api.attendance.attendance_schema import AttendanceRecordOut
from api.user.user_schema import LoginRequest, TokenResponse, UserBrief, UserOut, WorkerCreate
from api.user.user_service import (
    authenticate_user,
    create_worker,
    delete_worker,
    export_workers_csv,
    get_access_token,
    get_user,
    list_users,
)

# Controller functions for auth and worker administration


def login_user(credentials: LoginRequest, db: Session, admin_only: bool = False) -> TokenResponse:
    user = authenticate_user(db, credentials.email, credentials.password, admin_only=admin_only)
    return TokenResponse(
        access_token=get_access_token(user),
        user=UserBrief.model_validate(user),
    )


def get_profile(db: Session, current_user: dict) -> UserOut:
    return UserOut.model_validate(get_user(db, current_user["id"]))


def create_worker_account(payload: WorkerCreate, db: Session) -> UserOut:
    return UserOut.model_validate(create_worker(db, payload))


def list_accounts(
    db: Session,
    role: str,
    q: Optional[str],
    clock: Callable[[], datetime],
) -> List[UserOut]:
    return list_users(db, role=role, q=q, clock=clock)


def export_workers(db: Session) -> Response:
    return Response(
        content=export_workers_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="workers.csv"'},
    )


def remove_worker(user_id: str, db: Session) -> dict:
    delete_worker(db, user_id)
    return {"ok": True}


def get_worker_attendance(
    user_id: str,
    db: Session,
    clock: Callable[[], datetime],
    limit: int,
    day_from: Optional[date],
    day_to: Optional[date],
) -> List[AttendanceRecordOut]:
    get_user(db, user_id)
    return AttendanceController.list_user_records(user_id, db, clock, limit, day_from, day_to)
