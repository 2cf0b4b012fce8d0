import csv
import io
import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from passlib.context import CryptContext
from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.attendance.attendance_service import AttendanceService
from api.attendance.lateness import ensure_utc, utc_now
from api.user.user_model import User, UserRole
from api.user.user_schema import UserOut, WorkerCreate
from helpers.token_helper import create_user_token
from utils.database_utils import is_unique_violation

logger = logging.getLogger(__name__)

# Initialize password hashing context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CSV_COLUMNS = ["employee_no", "full_name", "email", "phone", "active", "role", "created_at"]


def hash_password(password: str) -> str:
    """Hash the given password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify that the plain password matches the hashed password."""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # unparseable hash
        return False


def authenticate_user(db: Session, email: str, password: str, admin_only: bool = False) -> User:
    """
    Authenticate user and raise structured HTTPException on failure.
    """
    user = db.query(User).filter(User.email == email.lower()).first()

    # If user missing OR password mismatch -> generic INVALID_CREDENTIALS
    if not user or not verify_password(password, user.password or ""):
        logger.info("Failed login for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_CREDENTIALS", "message": "Email or password incorrect"},
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "USER_INACTIVE", "message": "User is inactive"},
        )

    if admin_only and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "ADMIN_ONLY", "message": "Only administrators can sign in here"},
        )

    return user


def get_access_token(user: User) -> str:
    return create_user_token(user)


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "User not found"},
        )
    return user


def _next_employee_no(db: Session) -> int:
    return (db.query(func.max(User.employee_no)).scalar() or 0) + 1


def create_worker(db: Session, data: WorkerCreate) -> User:
    """Create an active WORKER account; the email must not be registered yet."""
    if db.query(User.id).filter(User.email == data.email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "EMAIL_TAKEN", "message": "Email already registered"},
        )

    worker = User(
        email=data.email,
        password=hash_password(data.password),
        role=UserRole.WORKER,
        full_name=data.full_name,
        phone=data.phone,
        employee_no=_next_employee_no(db),
        active=True,
    )
    try:
        db.add(worker)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # two admins registering the same email at once
        if is_unique_violation(e, columns=("email",)):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "EMAIL_TAKEN", "message": "Email already registered"},
            )
        raise
    db.refresh(worker)
    logger.info("Worker %s created (%s)", worker.id, worker.email)
    return worker


def list_users(
    db: Session,
    role: str = "WORKER",
    q: Optional[str] = None,
    clock: Callable[[], datetime] = utc_now,
    limit: int = 500,
) -> List[UserOut]:
    """
    role: WORKER | ADMIN | ALL (ALL means everyone except admins).
    q matches full name or email, case-insensitive.
    """
    query = db.query(User)
    role = (role or "WORKER").strip().upper()
    if role == "ALL":
        query = query.filter(User.role != UserRole.ADMIN)
    else:
        try:
            query = query.filter(User.role == UserRole(role))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "INVALID_ROLE", "message": "role must be WORKER, ADMIN or ALL"},
            )

    q = (q or "").strip()
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))

    users = query.order_by(User.created_at.desc(), User.employee_no.desc()).limit(limit).all()
    marked = AttendanceService(db, clock).marked_today([u.id for u in users])

    out = []
    for u in users:
        item = UserOut.model_validate(u)
        item.has_marked_today = u.id in marked
        out.append(item)
    return out


def delete_worker(db: Session, user_id: str) -> None:
    """Delete a WORKER together with its attendance records. Admins are never deleted here."""
    worker = (
        db.query(User)
        .filter(User.id == user_id, User.role == UserRole.WORKER)
        .first()
    )
    if not worker:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "User not found or not a worker"},
        )
    db.delete(worker)
    db.commit()
    logger.info("Worker %s deleted", user_id)


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def export_workers_csv(db: Session) -> str:
    workers = (
        db.query(User)
        .filter(User.role == UserRole.WORKER)
        .order_by(User.employee_no.is_(None), User.employee_no, User.created_at.desc())
        .all()
    )
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for w in workers:
        writer.writerow([_csv_value(getattr(w, col)) for col in CSV_COLUMNS])
    return buffer.getvalue()
