# api/attendance/attendance_schema.py

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime

from api.attendance.attendance_records_model import AttendanceStatus
from api.attendance.lateness import ensure_utc


class AttendanceIn(BaseModel):
    """
    Check-in payload. The worker comes from the bearer token, never the body.
    """
    qr_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("qr_token", "qrToken"),
    )
    justification_text: Optional[str] = Field(
        None,
        max_length=1000,
        validation_alias=AliasChoices("justification_text", "justificationText", "lateReasonText"),
        description="Required when the check-in is after the window cutoff",
    )


class AttendanceMarkOut(BaseModel):
    ok: bool = True
    attendance_id: str
    marked_at: datetime
    status: AttendanceStatus
    photo_url: Optional[str] = None


class AttendanceRecordOut(BaseModel):
    id: str
    user_id: str
    marked_at: datetime
    local_day: date
    status: Optional[AttendanceStatus] = None
    justification_text: Optional[str] = None
    reason_category: Optional[str] = None
    reason_score: Optional[int] = None
    photo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("marked_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
