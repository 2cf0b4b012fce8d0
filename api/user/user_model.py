# api/user/user_model.py
from sqlalchemy import Column, BigInteger, String, Boolean, Enum, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from config.database import Base
import enum
from utils.database_utils import generate_id


class UserRole(str, enum.Enum):
    ADMIN  = 'ADMIN'
    WORKER = 'WORKER'


class User(Base):
    __tablename__ = 'users'

    id          = Column(String(24), primary_key=True, default=generate_id)
    email       = Column(String(255), nullable=False, unique=True, index=True)
    password    = Column(String(255), nullable=False)
    role        = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.WORKER)
    full_name   = Column(String(100), nullable=True)
    phone       = Column(String(20), nullable=True)
    employee_no = Column(BigInteger, nullable=True)
    active      = Column(Boolean, nullable=False, default=True)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # deleting a worker removes their check-ins
    attendance_records = relationship(
        "AttendanceRecord",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
