from sqlalchemy import (
    Column,
    String,
    Time,
    DateTime,
    ForeignKey,
    func,
)
from config.database import Base
from utils.database_utils import generate_id


class QRWindow(Base):
    __tablename__ = "qr_windows"

    id            = Column(String(24), primary_key=True, default=generate_id)
    token         = Column(String(64), nullable=False, unique=True, index=True)
    label         = Column(String(100), nullable=True)
    # NULL means "use settings.DEFAULT_CUTOFF_TIME"
    cutoff_time   = Column(Time, nullable=True)
    expires_at    = Column(DateTime(timezone=True), nullable=True, index=True)
    created_by    = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at    = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __init__(self, token, label=None, cutoff_time=None, expires_at=None, created_by=None):
        self.id          = generate_id()
        self.token       = token
        self.label       = label
        self.cutoff_time = cutoff_time
        self.expires_at  = expires_at
        self.created_by  = created_by

    def __repr__(self):
        return f"<QRWindow(id={self.id}, label='{self.label}', cutoff={self.cutoff_time})>"
