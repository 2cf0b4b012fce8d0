# api/qr_windows/qr_windows_controller.py

from datetime import datetime
from typing import Callable, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.qr_windows.qr_windows_schema import QRWindowCreate, QRWindowGenerated, QRWindowOut
from api.qr_windows.qr_windows_service import QRWindowService, render_qr_data_url


class QRWindowController:
    @staticmethod
    def generate(
        payload: QRWindowCreate,
        db: Session,
        current_user: dict,
        clock: Callable[[], datetime],
    ) -> QRWindowGenerated:
        svc = QRWindowService(db, clock)
        expires_at = payload.expires_at
        if expires_at is None and payload.expires_in_minutes:
            expires_at = svc.expires_in(payload.expires_in_minutes)

        window = svc.generate_window(
            label=payload.label.strip(),
            cutoff_time=payload.on_time_until,
            expires_at=expires_at,
            created_by=current_user["id"],
        )
        out = QRWindowOut.from_window(window)
        return QRWindowGenerated(**out.model_dump(), qr_image=render_qr_data_url(window.token))

    @staticmethod
    def list_windows(db: Session, limit: int) -> List[QRWindowOut]:
        return [QRWindowOut.from_window(w) for w in QRWindowService(db).list_windows(limit)]

    @staticmethod
    def expire(window_id: str, db: Session, clock: Callable[[], datetime]) -> QRWindowOut:
        window = QRWindowService(db, clock).expire_window(window_id)
        if not window:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "NOT_FOUND", "message": "QR window not found"},
            )
        return QRWindowOut.from_window(window)
