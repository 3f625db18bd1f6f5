import os
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.database import Base, build_engine  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.doctor import Doctor  # noqa: E402
from backend.models.notification import Notification  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.scheduling.lifecycle import AppointmentLifecycleManager  # noqa: E402
from backend.scheduling.locks import DoctorLocks  # noqa: E402
from backend.scheduling.sql_store import SqlSchedulingStore  # noqa: E402

DOCTOR_ID = 'doc-1'
OTHER_DOCTOR_ID = 'doc-2'
PATIENT_ID = 'pat-1'
OTHER_PATIENT_ID = 'pat-2'
ADMIN_ID = 'adm-1'

MONDAY = date(2025, 6, 16)
BLOCKED_MONDAY = date(2025, 6, 9)

MORNING_SCHEDULE = {
    'monday': [{'start_time': '09:00', 'end_time': '12:00', 'is_available': True}],
    'tuesday': [],
    'wednesday': [
        {'start_time': '09:00', 'end_time': '10:00', 'is_available': False},
        {'start_time': '14:00', 'end_time': '16:00', 'is_available': True},
    ],
    'thursday': [],
    'friday': [],
    'saturday': [],
    'sunday': [],
}


@pytest.fixture
def session_factory(tmp_path):
    # A file database so that sessions opened from several threads share state.
    engine = build_engine(f"sqlite:///{tmp_path / 'scheduling.db'}")
    tables = [User.__table__, Doctor.__table__, Appointment.__table__, Notification.__table__]
    Base.metadata.create_all(bind=engine, tables=tables)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = testing_session_local()
    try:
        db.add_all(
            [
                User(id=DOCTOR_ID, email='house@clinic.test', role='DOCTOR', first_name='Gregory', last_name='House'),
                User(id=OTHER_DOCTOR_ID, email='wilson@clinic.test', role='DOCTOR', first_name='James', last_name='Wilson'),
                User(id=PATIENT_ID, email='ana@example.test', role='PATIENT', first_name='Ana', last_name='Lopez'),
                User(id=OTHER_PATIENT_ID, email='ben@example.test', role='PATIENT', first_name='Ben', last_name='Okafor'),
                User(id=ADMIN_ID, email='admin@clinic.test', role='ADMIN', first_name='Site', last_name='Admin'),
                Doctor(
                    user_id=DOCTOR_ID,
                    specialty='Diagnostics',
                    timezone='America/New_York',
                    weekly_schedule=MORNING_SCHEDULE,
                    blocked_dates=[BLOCKED_MONDAY.isoformat()],
                ),
                Doctor(user_id=OTHER_DOCTOR_ID, specialty='Oncology', timezone='UTC', weekly_schedule=None, blocked_dates=[]),
            ]
        )
        db.commit()
    finally:
        db.close()

    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(tables)))
        engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlSchedulingStore:
    return SqlSchedulingStore(session_factory)


@pytest.fixture
def manager(store) -> AppointmentLifecycleManager:
    return AppointmentLifecycleManager(store, locks=DoctorLocks())
