# api/qr_windows/qr_windows_schema.py

from datetime import datetime, time
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from api.attendance.lateness import effective_cutoff, ensure_utc
from api.qr_windows.qr_windows_service import normalize_time_hhmm
from config.settings import settings


def _hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


class QRWindowCreate(BaseModel):
    label: str = Field("Shift", min_length=1, max_length=100)
    on_time_until: Optional[time] = Field(
        None,
        validation_alias=AliasChoices("on_time_until", "onTimeUntil"),
        description="Cutoff as HH:MM; later check-ins are late",
    )
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    expires_in_minutes: Optional[int] = Field(
        None,
        ge=1,
        le=7 * 24 * 60,
        validation_alias=AliasChoices("expires_in_minutes", "expiresInMinutes"),
    )

    @field_validator("on_time_until", mode="before")
    @classmethod
    def _normalize_cutoff(cls, v):
        if isinstance(v, time):
            return v.replace(second=0, microsecond=0)
        return normalize_time_hhmm(v)

    @field_validator("expires_at")
    @classmethod
    def _expiry_as_utc(cls, v):
        if v is None:
            return None
        # naive values are local wall-clock time
        if v.tzinfo is None:
            v = v.replace(tzinfo=settings.local_zone)
        return ensure_utc(v)


class QRWindowOut(BaseModel):
    id: str
    token: str
    label: Optional[str] = None
    on_time_until: Optional[str] = None
    effective_on_time_until: str
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_window(cls, window) -> "QRWindowOut":
        return cls(
            id=window.id,
            token=window.token,
            label=window.label,
            on_time_until=_hhmm(window.cutoff_time),
            effective_on_time_until=_hhmm(effective_cutoff(window.cutoff_time)),
            expires_at=ensure_utc(window.expires_at) if window.expires_at else None,
            created_by=window.created_by,
            created_at=ensure_utc(window.created_at) if window.created_at else None,
        )


class QRWindowGenerated(QRWindowOut):
    qr_image: str = Field(..., description="PNG data URL encoding the token")
