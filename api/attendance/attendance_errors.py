# api/attendance/attendance_errors.py

from typing import Any, Dict

from fastapi import status


class AttendanceError(Exception):
    """Base class for check-in outcomes other than success."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ATTENDANCE_ERROR"
    message = "Attendance could not be recorded"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidQR(AttendanceError):
    code = "INVALID_QR"
    message = "Invalid QR code"


class ExpiredQR(AttendanceError):
    code = "EXPIRED_QR"
    message = "QR code has expired"


class DuplicateAttendance(AttendanceError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_ATTENDANCE"
    message = "Attendance already recorded today"


class DuplicatePhoto(AttendanceError):
    code = "DUPLICATE_PHOTO"
    message = "This photo was already used today"


class InvalidPhoto(AttendanceError):
    code = "INVALID_PHOTO"
    message = "Photo is missing or is not a supported image"


class JustificationRequired(AttendanceError):
    code = "JUSTIFICATION_REQUIRED"
    message = "A justification is required for a late check-in"

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["require_justification"] = True
        return detail


class Unauthenticated(AttendanceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    message = "Not authenticated"


class StorageFailure(AttendanceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_FAILURE"
    message = "Error recording attendance"
