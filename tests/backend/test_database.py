import pytest
from sqlalchemy import inspect, text

from backend import database
from backend.database import build_engine, ensure_appointment_schema


@pytest.fixture
def legacy_engine(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(database, '_appointment_schema_checked', False)
    engine = build_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as connection:
        connection.execute(
            text(
                'CREATE TABLE appointments ('
                'id VARCHAR PRIMARY KEY, patient_id VARCHAR, doctor_id VARCHAR, appointment_date DATE, '
                'start_time VARCHAR(5), end_time VARCHAR(5), status VARCHAR, created_at DATETIME, updated_at DATETIME)'
            )
        )
        connection.execute(
            text(
                "INSERT INTO appointments (id, patient_id, doctor_id, appointment_date, start_time, end_time, status) "
                "VALUES ('old-1', 'pat-1', 'doc-1', '2025-06-16', '09:00', '09:30', 'CONFIRMED')"
            )
        )
    try:
        yield engine
    finally:
        engine.dispose()


def test_ensure_appointment_schema_adds_missing_columns(legacy_engine) -> None:
    ensure_appointment_schema(legacy_engine)

    inspector = inspect(legacy_engine)
    columns = {column['name'] for column in inspector.get_columns('appointments')}
    indexes = {index['name'] for index in inspector.get_indexes('appointments')}

    assert {'appointment_type', 'reason', 'notes', 'version'} <= columns
    assert 'idx_appointments_doctor_date' in indexes
    with legacy_engine.connect() as connection:
        assert connection.execute(text("SELECT version FROM appointments WHERE id = 'old-1'")).scalar() == 1


def test_ensure_appointment_schema_skips_missing_table(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(database, '_appointment_schema_checked', False)
    engine = build_engine(f"sqlite:///{tmp_path / 'empty.db'}")

    ensure_appointment_schema(engine)

    assert database._appointment_schema_checked is True
    assert inspect(engine).get_table_names() == []
    engine.dispose()
