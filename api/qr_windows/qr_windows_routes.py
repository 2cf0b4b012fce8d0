# api/qr_windows/qr_windows_routes.py

from datetime import datetime
from typing import Callable, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import admin_required
from api.qr_windows.qr_windows_controller import QRWindowController
from api.qr_windows.qr_windows_schema import QRWindowCreate, QRWindowGenerated, QRWindowOut
from utils.deps import get_clock

router = APIRouter(prefix="/qr", tags=["qr"])


@router.post(
    "/generate",
    response_model=QRWindowGenerated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a check-in window and render its QR code",
)
def generate(
    payload: QRWindowCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_required),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return QRWindowController.generate(payload, db, current_user, clock)


@router.get("/windows", response_model=List[QRWindowOut], summary="List check-in windows")
def list_windows(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_required),
):
    return QRWindowController.list_windows(db, limit)


@router.post(
    "/windows/{window_id}/expire",
    response_model=QRWindowOut,
    summary="Expire a window now; the row is kept",
)
def expire_window(
    window_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_required),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return QRWindowController.expire(window_id, db, clock)
