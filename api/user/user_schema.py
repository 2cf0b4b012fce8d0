from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from api.user.user_model import UserRole
from api.attendance.lateness import ensure_utc


# ----- Authentication -----
class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()


class UserBrief(BaseModel):
    id: str
    email: str
    role: UserRole
    full_name: Optional[str] = None
    employee_no: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserBrief


# ----- Workers admin -----
class WorkerCreate(BaseModel):
    full_name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        validation_alias=AliasChoices("full_name", "fullName"),
    )
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    phone: Optional[str] = Field(
        None,
        pattern=r"^[0-9+\s-]{6,20}$",
        description="Digits, spaces, + and -; 6 to 20 characters",
    )

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()

    @field_validator("full_name", "phone", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class UserOut(BaseModel):
    id: str
    email: str
    role: UserRole
    full_name: Optional[str] = None
    phone: Optional[str] = None
    active: bool
    employee_no: Optional[int] = None
    created_at: datetime
    has_marked_today: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Message(BaseModel):
    ok: bool = True
    message: Optional[str] = None
