import pytest
from fastapi.testclient import TestClient

from backend.auth import jwt_handler
from backend.auth.dependencies import get_lifecycle_manager, get_store
from backend.main import app
from backend.scheduling.lifecycle import AppointmentLifecycleManager
from backend.scheduling.locks import DoctorLocks

from tests.backend.conftest import DOCTOR_ID, OTHER_PATIENT_ID, PATIENT_ID


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_lifecycle_manager] = lambda: AppointmentLifecycleManager(store, locks=DoctorLocks())
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(user_id: str, role: str) -> dict:
    return {'Authorization': f'Bearer {jwt_handler.create_access_token(user_id, role)}'}


def _book(client, user_id=PATIENT_ID, start_time='10:00', end_time='10:30', appointment_date='2025-06-16'):
    return client.post(
        '/appointments',
        json={
            'doctor_id': DOCTOR_ID,
            'appointment_date': appointment_date,
            'start_time': start_time,
            'end_time': end_time,
        },
        headers=_headers(user_id, 'PATIENT'),
    )


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Health Appointment API Running'}


def test_requests_without_valid_token_are_unauthorized(client) -> None:
    response = client.get('/appointments', headers={'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401


def test_token_for_unknown_user_is_unauthorized(client) -> None:
    response = client.get('/appointments', headers=_headers('ghost', 'PATIENT'))

    assert response.status_code == 401
    assert response.json() == {'detail': 'User not found'}


def test_booking_errors_map_to_status_codes(client) -> None:
    assert _book(client).status_code == 201

    conflict = _book(client, user_id=OTHER_PATIENT_ID, start_time='10:15', end_time='10:45')
    assert conflict.status_code == 409
    assert conflict.json() == {'detail': 'This time slot is already booked. Please choose another time.'}

    assert _book(client, appointment_date='2025-06-09').status_code == 409
    assert _book(client, start_time='10:30', end_time='10:00').status_code == 400


def test_doctor_cannot_book(client) -> None:
    response = client.post(
        '/appointments',
        json={'doctor_id': DOCTOR_ID, 'appointment_date': '2025-06-16', 'start_time': '10:00', 'end_time': '10:30'},
        headers=_headers(DOCTOR_ID, 'DOCTOR'),
    )

    assert response.status_code == 403


def test_slots_endpoint_uses_date_query_parameter(client) -> None:
    response = client.get(f'/availability/doctors/{DOCTOR_ID}/slots?date=2025-06-16', headers=_headers(PATIENT_ID, 'PATIENT'))

    assert response.status_code == 200
    assert response.json()[0] == {'start_time': '09:00', 'end_time': '09:30', 'is_available': True}
    assert len(response.json()) == 6


def test_notification_of_another_user_is_forbidden(client) -> None:
    _book(client)
    doctor_inbox = client.get('/notifications', headers=_headers(DOCTOR_ID, 'DOCTOR')).json()

    response = client.patch(
        f"/notifications/{doctor_inbox[0]['id']}",
        json={'is_read': True},
        headers=_headers(PATIENT_ID, 'PATIENT'),
    )

    assert response.status_code == 403
