import pytest

from tests.helpers import approved_doctor, book, login, signup_and_login


@pytest.fixture
def appointment_id(client):
    doctor_id = approved_doctor(client)
    signup_and_login(client, 'patient')
    return book(client, doctor_id)


def _confirm(client, appointment_id):
    login(client, 'doctor')
    assert client.post(f'/doctor/appointments/{appointment_id}/confirm').status_code == 200


def test_chat_needs_login(client, appointment_id):
    client.post('/logout')
    response = client.post('/chat/send', json={'appointmentId': appointment_id, 'message': 'Hello'})
    assert response.status_code == 401


def test_chat_rejected_while_pending(client, appointment_id):
    response = client.post('/chat/send', json={
        'appointmentId': appointment_id, 'message': 'Hello', 'senderType': 'patient',
    })

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Chat is only available for confirmed appointments'


def test_chat_between_participants(client, appointment_id):
    _confirm(client, appointment_id)
    doctor_reply = client.post('/chat/send', json={
        'appointmentId': appointment_id, 'message': 'How are you feeling?', 'senderType': 'doctor',
    })
    assert doctor_reply.status_code == 200
    assert doctor_reply.get_json()['chat']['senderType'] == 'doctor'

    login(client, 'patient')
    patient_reply = client.post('/chat/send', json={'appointmentId': appointment_id, 'message': 'Better'})
    assert patient_reply.status_code == 200

    history = client.get(f'/chat/{appointment_id}').get_json()['messages']
    assert [entry['message'] for entry in history] == ['How are you feeling?', 'Better']
    assert [entry['senderType'] for entry in history] == ['doctor', 'patient']


def test_sender_type_must_match_session(client, appointment_id):
    _confirm(client, appointment_id)

    response = client.post('/chat/send', json={
        'appointmentId': appointment_id, 'message': 'Hi', 'senderType': 'patient',
    })

    assert response.status_code == 401


def test_outsider_cannot_chat(client, other_client, appointment_id):
    _confirm(client, appointment_id)
    signup_and_login(other_client, 'patient', 2)

    send = other_client.post('/chat/send', json={'appointmentId': appointment_id, 'message': 'Hi'})
    read = other_client.get(f'/chat/{appointment_id}')

    assert send.status_code == read.status_code == 403


def test_staff_cannot_chat(client, other_client, appointment_id):
    signup_and_login(other_client, 'employee')
    assert other_client.get(f'/chat/{appointment_id}').status_code == 401


def test_empty_message_and_missing_appointment(client, appointment_id):
    _confirm(client, appointment_id)

    empty = client.post('/chat/send', json={'appointmentId': appointment_id, 'message': '  '})
    missing = client.post('/chat/send', json={'appointmentId': 999, 'message': 'Hi'})

    assert empty.status_code == 400
    assert missing.status_code == 404
