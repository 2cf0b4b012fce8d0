# api/qr_windows/qr_windows_service.py

import base64
import io
import logging
import re
from datetime import datetime, time, timedelta
from typing import Callable, List, Optional

import qrcode
from sqlalchemy.orm import Session

from api.attendance.lateness import ensure_utc, utc_now
from api.qr_windows.qr_windows_model import QRWindow
from utils.database_utils import generate_id

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^(\d{2}):(\d{2})(?::\d{2})?$")
_ISO_TIME = re.compile(r"T(\d{2}):(\d{2})")


def normalize_time_hhmm(value: Optional[str]) -> Optional[time]:
    """
    Accepts "HH:MM", "HH:MM:SS" or an ISO datetime ("2025-09-26T09:10...").
    Returns None for an empty value and raises ValueError for anything else.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    m = _HHMM.match(s) or _ISO_TIME.search(s)
    if not m:
        raise ValueError("on_time_until must look like HH:MM")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        raise ValueError("on_time_until must look like HH:MM")
    return time(hh, mm)


def render_qr_data_url(payload: str) -> str:
    qr = qrcode.QRCode(version=1, box_size=8, border=1)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class QRWindowService:
    """Registry of check-in windows. The check-in path only reads from it."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    def find_window_by_token(self, token: str) -> Optional[QRWindow]:
        if not token:
            return None
        return (
            self.db.query(QRWindow)
            .filter(QRWindow.token == token)
            .one_or_none()
        )

    def is_expired(self, window: QRWindow, now: Optional[datetime] = None) -> bool:
        if window.expires_at is None:
            return False
        return ensure_utc(now or self.clock()) > ensure_utc(window.expires_at)

    def generate_window(
        self,
        label: str,
        cutoff_time: Optional[time],
        expires_at: Optional[datetime],
        created_by: Optional[str],
    ) -> QRWindow:
        window = QRWindow(
            token=generate_id(),
            label=label,
            cutoff_time=cutoff_time,
            expires_at=ensure_utc(expires_at) if expires_at else None,
            created_by=created_by,
        )
        self.db.add(window)
        self.db.commit()
        self.db.refresh(window)
        logger.info("QR window %s created (label=%r, cutoff=%s)", window.id, label, cutoff_time)
        return window

    def expires_in(self, minutes: int) -> datetime:
        return self.clock() + timedelta(minutes=minutes)

    def list_windows(self, limit: int = 100) -> List[QRWindow]:
        return (
            self.db.query(QRWindow)
            .order_by(QRWindow.created_at.desc())
            .limit(limit)
            .all()
        )

    def expire_window(self, window_id: str) -> Optional[QRWindow]:
        window = self.db.query(QRWindow).filter(QRWindow.id == window_id).one_or_none()
        if not window:
            return None
        now = self.clock()
        # keep an earlier expiry; windows are never deleted
        if not self.is_expired(window, now):
            window.expires_at = now
            self.db.commit()
            self.db.refresh(window)
            logger.info("QR window %s expired", window.id)
        return window
