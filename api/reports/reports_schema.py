from datetime import date
from typing import Optional

from pydantic import BaseModel


class DailySummary(BaseModel):
    day: date
    punctual: int = 0
    late: int = 0
    absent: int = 0


class UserSummary(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    email: str
    punctual: int = 0
    late: int = 0
    absent: int = 0
