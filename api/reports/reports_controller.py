from datetime import date
from typing import List

from sqlalchemy.orm import Session

from api.reports.reports_schema import DailySummary, UserSummary
from api.reports.reports_service import ReportsService


class ReportsController:
    @staticmethod
    def attendance_summary(day_from: date, day_to: date, db: Session) -> List[DailySummary]:
        return ReportsService(db).daily_summary(day_from, day_to)

    @staticmethod
    def attendance_by_user(day_from: date, day_to: date, db: Session) -> List[UserSummary]:
        return ReportsService(db).by_user(day_from, day_to)
