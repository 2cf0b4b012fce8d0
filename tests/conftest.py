import os
import tempfile

# settings are read at import time; point them at throwaway resources first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="restaurant-uploads-")
os.environ["LOCAL_TIMEZONE"] = "America/Lima"
os.environ["DEFAULT_CUTOFF_TIME"] = "09:10"
os.environ["LOGIN_RATE_LIMIT"] = "100/minute"
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("REDIS_URL", None)

from datetime import datetime, time, timedelta, timezone
from io import BytesIO
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import main
from config.database import Base, SessionLocal, engine
from api.qr_windows.qr_windows_service import QRWindowService
from api.user.user_model import User, UserRole
from api.user.user_service import hash_password
from utils.deps import get_clock

LIMA = ZoneInfo("America/Lima")
PASSWORD = "secret123"


def lima(year, month, day, hour, minute, second=0) -> datetime:
    """UTC instant for a Lima wall-clock time."""
    return datetime(year, month, day, hour, minute, second, tzinfo=LIMA).astimezone(timezone.utc)


def png_bytes(color=(200, 30, 30), size=(8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FakeClock(lima(2025, 9, 26, 8, 30))


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db, clock):
    main.app.dependency_overrides[get_clock] = lambda: clock
    try:
        with TestClient(main.app) as c:
            yield c
    finally:
        main.app.dependency_overrides.clear()


def _create_user(db, email, role, full_name, active=True) -> User:
    user = User(
        email=email,
        password=hash_password(PASSWORD),
        role=role,
        full_name=full_name,
        active=active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def make_user(db):
    def factory(email, role=UserRole.WORKER, full_name="Worker", active=True):
        return _create_user(db, email, role, full_name, active)
    return factory


@pytest.fixture()
def admin(make_user):
    return make_user("admin@restaurante.pe", UserRole.ADMIN, "Admin")


@pytest.fixture()
def worker(make_user):
    return make_user("ana@restaurante.pe", UserRole.WORKER, "Ana Torres")


def login(client, email, password=PASSWORD):
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client, admin):
    return login(client, admin.email)


@pytest.fixture()
def worker_headers(client, worker):
    return login(client, worker.email)


@pytest.fixture()
def window(db, clock, admin):
    return QRWindowService(db, clock).generate_window(
        label="Morning", cutoff_time=time(9, 10), expires_at=None, created_by=admin.id
    )


@pytest.fixture()
def upload_dir():
    from config.database import UPLOAD_DIR
    return UPLOAD_DIR
