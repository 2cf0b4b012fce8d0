from datetime import date, time, timedelta

import pytest

from api.attendance.attendance_errors import (
    DuplicateAttendance,
    DuplicatePhoto,
    ExpiredQR,
    InvalidPhoto,
    InvalidQR,
    JustificationRequired,
    StorageFailure,
    Unauthenticated,
)
from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.attendance.attendance_service import AttendanceService, _Justification
from api.qr_windows.qr_windows_service import QRWindowService
from api.uploads.uploads_service import FileStorage
from config.database import SessionLocal
from conftest import LIMA, lima, png_bytes


@pytest.fixture()
def service(db, clock):
    return AttendanceService(db, clock, tz=LIMA)


@pytest.fixture()
def storage(tmp_path):
    return FileStorage("attendance", root=tmp_path)


def test_punctual_check_in(service, worker, window, clock, db):
    clock.set(lima(2025, 9, 26, 8, 55))
    result = service.mark_attendance(worker.id, window.token)

    assert result.status == AttendanceStatus.punctual
    assert result.marked_at == clock.now
    record = db.query(AttendanceRecord).filter_by(id=result.attendance_id).one()
    assert record.local_day == date(2025, 9, 26)
    assert record.justification_text is None
    assert record.reason_category is None


def test_check_in_exactly_at_cutoff_is_punctual(service, worker, window, clock):
    clock.set(lima(2025, 9, 26, 9, 10, 0))
    assert service.mark_attendance(worker.id, window.token).status == AttendanceStatus.punctual


def test_late_check_in_without_justification_is_rejected(service, worker, window, clock, db):
    clock.set(lima(2025, 9, 26, 9, 10, 1))
    with pytest.raises(JustificationRequired) as exc:
        service.mark_attendance(worker.id, window.token, "   ")
    assert exc.value.to_detail()["require_justification"] is True
    assert db.query(AttendanceRecord).count() == 0


def test_late_check_in_is_classified(service, worker, window, clock, db):
    clock.set(lima(2025, 9, 26, 9, 40))
    result = service.mark_attendance(worker.id, window.token, "  Mucho tráfico en la Panamericana ")

    assert result.status == AttendanceStatus.late
    record = db.query(AttendanceRecord).filter_by(id=result.attendance_id).one()
    assert record.justification_text == "Mucho tráfico en la Panamericana"
    assert record.reason_category == "Traffic"
    assert record.reason_score == 95


def test_punctual_justification_is_kept_but_not_classified(service, worker, window, clock, db):
    clock.set(lima(2025, 9, 26, 8, 0))
    result = service.mark_attendance(worker.id, window.token, "Llegué temprano por el bus")
    record = db.query(AttendanceRecord).filter_by(id=result.attendance_id).one()
    assert record.justification_text == "Llegué temprano por el bus"
    assert record.reason_category is None
    assert record.reason_score is None


def test_window_without_cutoff_uses_default(service, worker, clock, db, admin):
    bare = QRWindowService(db, clock).generate_window("Any", None, None, admin.id)
    clock.set(lima(2025, 9, 26, 9, 11))
    with pytest.raises(JustificationRequired):
        service.mark_attendance(worker.id, bare.token)


def test_unknown_token(service, worker):
    with pytest.raises(InvalidQR):
        service.mark_attendance(worker.id, "does-not-exist")


def test_expired_window(service, worker, clock, db, admin):
    expired = QRWindowService(db, clock).generate_window(
        "Old", time(9, 10), clock.now - timedelta(minutes=1), admin.id
    )
    with pytest.raises(ExpiredQR):
        service.mark_attendance(worker.id, expired.token)


def test_window_valid_until_its_expiry_instant(service, worker, clock, db, admin):
    edge = QRWindowService(db, clock).generate_window("Edge", time(9, 10), clock.now, admin.id)
    assert service.mark_attendance(worker.id, edge.token).status == AttendanceStatus.punctual


def test_inactive_or_unknown_worker(service, make_user, window):
    ghost = make_user("ghost@restaurante.pe", active=False)
    with pytest.raises(Unauthenticated):
        service.mark_attendance(ghost.id, window.token)
    with pytest.raises(Unauthenticated):
        service.mark_attendance("nobody", window.token)


def test_second_check_in_same_day_is_duplicate(service, worker, window, clock, db):
    service.mark_attendance(worker.id, window.token)
    clock.advance(hours=3)
    with pytest.raises(DuplicateAttendance):
        service.mark_attendance(worker.id, window.token, "otra vez")
    assert db.query(AttendanceRecord).count() == 1


def test_next_local_day_is_a_new_check_in(service, worker, window, clock):
    clock.set(lima(2025, 9, 26, 23, 50))
    service.mark_attendance(worker.id, window.token, "turno noche")
    # both instants are on the 27th in UTC; only the second one is the 27th in Lima
    clock.set(lima(2025, 9, 27, 0, 5))
    assert service.mark_attendance(worker.id, window.token).status == AttendanceStatus.punctual


def test_late_evening_check_in_counts_for_local_day(service, worker, window, clock, db):
    clock.set(lima(2025, 9, 26, 21, 30))
    result = service.mark_attendance(worker.id, window.token, "cita médica")
    record = db.query(AttendanceRecord).filter_by(id=result.attendance_id).one()
    assert record.local_day == date(2025, 9, 26)


def test_unique_index_decides_lost_race(service, worker, window, clock, db, monkeypatch):
    service.mark_attendance(worker.id, window.token)
    # the pre-check misses the committed row, as a concurrent request would
    monkeypatch.setattr(AttendanceService, "has_attendance_on", lambda self, user_id, day: False)
    with pytest.raises(DuplicateAttendance):
        service.mark_attendance(worker.id, window.token)
    assert db.query(AttendanceRecord).count() == 1


def test_other_workers_are_independent(service, worker, make_user, window):
    other = make_user("luis@restaurante.pe", full_name="Luis")
    service.mark_attendance(worker.id, window.token)
    assert service.mark_attendance(other.id, window.token).status == AttendanceStatus.punctual


def test_concurrent_check_ins_with_different_windows(worker, window, clock, db, admin, monkeypatch):
    second = QRWindowService(db, clock).generate_window("Back door", time(9, 10), None, admin.id)
    first_session, second_session = SessionLocal(), SessionLocal()
    first = AttendanceService(first_session, clock, tz=LIMA)
    second_svc = AttendanceService(second_session, clock, tz=LIMA)
    outcomes = []

    check = AttendanceService.has_attendance_on

    def interleaved(self, user_id, day):
        seen = check(self, user_id, day)
        if self is second_svc and not outcomes:
            # the other request completes between this pre-check and the insert
            outcomes.append(first.mark_attendance(worker.id, window.token).status)
        return seen

    monkeypatch.setattr(AttendanceService, "has_attendance_on", interleaved)
    try:
        with pytest.raises(DuplicateAttendance):
            second_svc.mark_attendance(worker.id, second.token)
    finally:
        first_session.close()
        second_session.close()

    assert outcomes == [AttendanceStatus.punctual]
    db.expire_all()
    assert db.query(AttendanceRecord).count() == 1


def test_database_error_is_storage_failure(service, window, db, caplog):
    # unknown user id trips the foreign key, not the per-day unique index
    with pytest.raises(StorageFailure) as exc:
        service._insert("no-such-user-id", window, _Justification())
    assert exc.value.to_detail() == {"code": "STORAGE_FAILURE", "message": "Error recording attendance"}
    assert any(r.exc_info for r in caplog.records if r.levelname == "ERROR")
    assert db.query(AttendanceRecord).count() == 0


# ─── Photo variant ────────────────────────────────────────────────────────────

def test_photo_check_in_stores_file(service, worker, window, storage):
    result = service.mark_attendance_with_photo(
        worker.id, window.token, png_bytes(), "image/png", storage
    )
    assert result.photo_url.startswith("/uploads/attendance/")
    assert result.photo_url.endswith(".png")
    assert len(list(storage.directory.iterdir())) == 1


def test_same_photo_twice_is_duplicate_photo(service, worker, window, clock, storage):
    photo = png_bytes()
    service.mark_attendance_with_photo(worker.id, window.token, photo, "image/png", storage)
    clock.advance(minutes=5)
    with pytest.raises(DuplicatePhoto):
        service.mark_attendance_with_photo(worker.id, window.token, photo, "image/png", storage)


def test_new_photo_same_day_is_duplicate_attendance(service, worker, window, clock, storage):
    service.mark_attendance_with_photo(worker.id, window.token, png_bytes((1, 2, 3)), "image/png", storage)
    with pytest.raises(DuplicateAttendance):
        service.mark_attendance_with_photo(worker.id, window.token, png_bytes((4, 5, 6)), "image/png", storage)
    assert len(list(storage.directory.iterdir())) == 1


def test_invalid_photo_is_rejected(service, worker, window, storage):
    with pytest.raises(InvalidPhoto):
        service.mark_attendance_with_photo(worker.id, window.token, b"not an image", "image/png", storage)
    with pytest.raises(InvalidPhoto):
        service.mark_attendance_with_photo(worker.id, window.token, png_bytes(), "application/pdf", storage)
    with pytest.raises(InvalidPhoto):
        service.mark_attendance_with_photo(worker.id, window.token, b"", "image/png", storage)
    assert list(storage.directory.iterdir()) == []


def test_photo_not_kept_when_late_without_justification(service, worker, window, clock, storage):
    clock.set(lima(2025, 9, 26, 9, 30))
    with pytest.raises(JustificationRequired):
        service.mark_attendance_with_photo(worker.id, window.token, png_bytes(), "image/png", storage)
    assert list(storage.directory.iterdir()) == []


def test_photo_removed_when_insert_loses_race(service, worker, window, storage, monkeypatch):
    service.mark_attendance_with_photo(worker.id, window.token, png_bytes((9, 9, 9)), "image/png", storage)
    monkeypatch.setattr(AttendanceService, "has_attendance_on", lambda self, user_id, day: False)
    with pytest.raises(DuplicateAttendance):
        service.mark_attendance_with_photo(worker.id, window.token, png_bytes((8, 8, 8)), "image/png", storage)
    assert len(list(storage.directory.iterdir())) == 1


def test_photo_write_error_is_storage_failure(service, worker, window, storage, db, monkeypatch):
    def disk_full(data, content_type=None):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(storage, "store", disk_full)
    with pytest.raises(StorageFailure):
        service.mark_attendance_with_photo(worker.id, window.token, png_bytes(), "image/png", storage)
    assert db.query(AttendanceRecord).count() == 0


def test_list_user_records_filters_by_local_day(service, worker, window, clock):
    for day in (24, 25, 26):
        clock.set(lima(2025, 9, day, 8, 0))
        service.mark_attendance(worker.id, window.token)

    records = service.list_user_records(worker.id, day_from=date(2025, 9, 25))
    assert [r.local_day for r in records] == [date(2025, 9, 26), date(2025, 9, 25)]
    assert len(service.list_user_records(worker.id, limit=0)) == 1
