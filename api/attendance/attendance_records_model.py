from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum
from config.database import Base
from utils.database_utils import generate_id


class AttendanceStatus(str, enum.Enum):
    punctual = "punctual"
    late     = "late"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        # one check-in per worker per local day (LOCAL_TIMEZONE, not UTC)
        UniqueConstraint("user_id", "local_day", name="uq_attendance_user_day"),
    )

    id              = Column(String(24), primary_key=True, default=generate_id)
    user_id         = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    qr_token        = Column(String(64), nullable=True)
    marked_at       = Column(DateTime(timezone=True), nullable=False)
    local_day       = Column(Date, nullable=False)
    status          = Column(Enum(AttendanceStatus, name="attendance_status"), nullable=True)
    justification_text = Column(Text, nullable=True)
    reason_category = Column(String(50), nullable=True)
    reason_score    = Column(Integer, nullable=True)
    photo_url       = Column(String(255), nullable=True)
    photo_sha256    = Column(String(64), nullable=True, index=True)

    user = relationship("User", back_populates="attendance_records")

    def __init__(self, user_id, qr_token, marked_at, local_day, status,
                 justification_text=None, reason_category=None, reason_score=None,
                 photo_url=None, photo_sha256=None):
        self.id                 = generate_id()
        self.user_id            = user_id
        self.qr_token           = qr_token
        self.marked_at          = marked_at
        self.local_day          = local_day
        self.status             = status
        self.justification_text = justification_text
        self.reason_category    = reason_category
        self.reason_score       = reason_score
        self.photo_url          = photo_url
        self.photo_sha256       = photo_sha256
