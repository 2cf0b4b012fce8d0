"""
Database utilities shared by the services
"""
import secrets
import string
from typing import Type, TypeVar, Optional, Sequence

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status

T = TypeVar('T')

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 24

# SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"


def generate_id(length: int = ID_LENGTH) -> str:
    """Random lowercase alphanumeric identifier (also used for QR tokens)"""
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(length))


def is_unique_violation(
    exc: IntegrityError,
    constraint: Optional[str] = None,
    columns: Sequence[str] = (),
) -> bool:
    """
    True when the IntegrityError comes from a UNIQUE index/constraint.

    PostgreSQL reports SQLSTATE 23505 and the constraint name in ``diag``;
    SQLite only gives a message such as
    "UNIQUE constraint failed: attendance_records.user_id, attendance_records.local_day",
    so there the violated columns are matched instead of the name.
    """
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None)
    if pgcode is not None:
        if pgcode != PG_UNIQUE_VIOLATION:
            return False
        if constraint is None:
            return True
        diag = getattr(orig, "diag", None)
        name = getattr(diag, "constraint_name", None)
        return name == constraint if name else constraint in str(orig)

    message = str(orig if orig is not None else exc)
    if "UNIQUE constraint failed" not in message:
        return False
    failed = message.split("UNIQUE constraint failed:", 1)[1]
    failed_columns = {c.strip().split(".")[-1] for c in failed.split(",")}
    return all(c in failed_columns for c in columns)


class DatabaseUtils:
    """Utility class for common database operations"""

    @staticmethod
    def get_or_404(db: Session, model_class: Type[T], detail: Optional[str] = None, **filters) -> T:
        """
        Get a single object by filters or raise 404 error
        """
        obj = db.query(model_class).filter_by(**filters).first()
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=detail or f"{model_class.__name__} not found"
            )
        return obj

    @staticmethod
    def exists(db: Session, model_class: Type[T], **filters) -> bool:
        """Check if object exists with given filters"""
        return db.query(
            db.query(model_class).filter_by(**filters).exists()
        ).scalar()
