from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import admin_required
from api.reports.reports_controller import ReportsController
from api.reports.reports_schema import DailySummary, UserSummary

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(admin_required)],
)


@router.get(
    "/attendance/summary",
    response_model=List[DailySummary],
    summary="Punctual, late and absent counts per local day",
)
def attendance_summary(
    day_from: date = Query(..., alias="from"),
    day_to: date = Query(..., alias="to"),
    db: Session = Depends(get_db),
):
    return ReportsController.attendance_summary(day_from, day_to, db)


@router.get(
    "/attendance/by-user",
    response_model=List[UserSummary],
    summary="Punctual, late and absent counts per active worker",
)
def attendance_by_user(
    day_from: date = Query(..., alias="from"),
    day_to: date = Query(..., alias="to"),
    db: Session = Depends(get_db),
):
    return ReportsController.attendance_by_user(day_from, day_to, db)
