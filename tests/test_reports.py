from datetime import date, time

from api.attendance.attendance_records_model import AttendanceRecord
from api.attendance.attendance_service import AttendanceService
from api.attendance import lateness
from api.qr_windows.qr_windows_service import QRWindowService
from api.reports.reports_service import ReportsService
from conftest import LIMA, lima


def _seed(db, clock, worker, window, make_user):
    """Ana: punctual 24th, late 25th, absent 26th. Luis: absent 24th and 25th, punctual 26th."""
    luis = make_user("luis@restaurante.pe", full_name="Luis Ramos")
    make_user("bruno@restaurante.pe", full_name="Bruno Inactivo", active=False)
    svc = AttendanceService(db, clock, tz=LIMA)

    clock.set(lima(2025, 9, 24, 9, 0))
    svc.mark_attendance(worker.id, window.token)
    clock.set(lima(2025, 9, 25, 9, 30))
    svc.mark_attendance(worker.id, window.token, "tráfico")
    clock.set(lima(2025, 9, 26, 8, 59))
    svc.mark_attendance(luis.id, window.token)
    return luis


def test_daily_summary(client, admin_headers, db, clock, worker, window, make_user):
    _seed(db, clock, worker, window, make_user)

    res = client.get(
        "/api/reports/attendance/summary",
        params={"from": "2025-09-24", "to": "2025-09-27"},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json() == [
        {"day": "2025-09-24", "punctual": 1, "late": 0, "absent": 1},
        {"day": "2025-09-25", "punctual": 0, "late": 1, "absent": 1},
        {"day": "2025-09-26", "punctual": 1, "late": 0, "absent": 1},
        {"day": "2025-09-27", "punctual": 0, "late": 0, "absent": 2},
    ]


def test_by_user_summary(client, admin_headers, db, clock, worker, window, make_user):
    luis = _seed(db, clock, worker, window, make_user)

    res = client.get(
        "/api/reports/attendance/by-user",
        params={"from": "2025-09-24", "to": "2025-09-26"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    rows = res.json()
    assert [r["full_name"] for r in rows] == ["Ana Torres", "Luis Ramos"]
    assert rows[0] == {
        "user_id": worker.id, "full_name": "Ana Torres", "email": "ana@restaurante.pe",
        "punctual": 1, "late": 1, "absent": 1,
    }
    assert rows[1]["user_id"] == luis.id
    assert (rows[1]["punctual"], rows[1]["late"], rows[1]["absent"]) == (1, 0, 2)


def test_rows_without_status_use_window_cutoff(db, clock, worker, admin):
    early = QRWindowService(db, clock).generate_window("Early", time(8, 0), None, admin.id)
    marked_at = lima(2025, 9, 26, 8, 30)
    db.add(AttendanceRecord(
        user_id=worker.id,
        qr_token=early.token,
        marked_at=marked_at,
        local_day=lateness.local_day(marked_at, LIMA),
        status=None,
    ))
    db.commit()

    summary = ReportsService(db, tz=LIMA).daily_summary(date(2025, 9, 26), date(2025, 9, 26))
    assert (summary[0].punctual, summary[0].late) == (0, 1)


def test_invalid_ranges(client, admin_headers):
    res = client.get(
        "/api/reports/attendance/summary",
        params={"from": "2025-09-27", "to": "2025-09-26"},
        headers=admin_headers,
    )
    assert res.status_code == 400

    res = client.get(
        "/api/reports/attendance/by-user",
        params={"from": "2024-01-01", "to": "2025-09-26"},
        headers=admin_headers,
    )
    assert res.status_code == 400

    res = client.get("/api/reports/attendance/summary", headers=admin_headers)
    assert res.status_code == 422


def test_reports_are_admin_only(client, worker_headers):
    res = client.get(
        "/api/reports/attendance/summary",
        params={"from": "2025-09-24", "to": "2025-09-26"},
        headers=worker_headers,
    )
    assert res.status_code == 403
