import re

from medihub.identity import approve_doctor, generate_ssn
from medihub.models import Doctor
from tests.helpers import fresh, signup, signup_and_login

SSN_PATTERN = re.compile(r'^DOC-[1-9]\d{8}$')


def test_generated_ssn_format():
    for _ in range(50):
        assert SSN_PATTERN.match(generate_ssn())


def test_doctor_requests_list_pending_only(client):
    first = signup(client, 'doctor', 1)
    signup(client, 'doctor', 2)
    approve_doctor(first)
    signup_and_login(client, 'employee')

    requests = client.get('/employee/doctor_requests').get_json()['doctors']

    assert [item['registrationNumber'] for item in requests] == ['REG-2']
    assert client.get('/employee/doctor_requests_count').get_json() == {'count': 1}


def test_approve_doctor_assigns_ssn(client):
    doctor_id = signup(client, 'doctor')
    signup_and_login(client, 'employee')

    response = client.post(f'/employee/approve_doctor/{doctor_id}')

    assert response.status_code == 200
    doctor = fresh(Doctor, doctor_id)
    assert doctor.is_approved is True
    assert SSN_PATTERN.match(doctor.ssn)
    assert response.get_json()['ssn'] == doctor.ssn


def test_reapproval_keeps_ssn(client):
    doctor_id = signup(client, 'doctor')
    signup_and_login(client, 'employee')
    first = client.post(f'/employee/approve_doctor/{doctor_id}').get_json()

    second = client.post(f'/employee/approve_doctor/{doctor_id}')

    assert second.status_code == 200
    assert second.get_json()['message'] == 'Doctor already approved'
    assert second.get_json()['ssn'] == first['ssn']
    assert fresh(Doctor, doctor_id).ssn == first['ssn']


def test_approve_doctor_bad_ids(client):
    signup_and_login(client, 'employee')

    assert client.post('/employee/approve_doctor/not-an-id').status_code == 400
    assert client.post('/employee/approve_doctor/404').status_code == 404


def test_only_employees_approve(client):
    doctor_id = signup(client, 'doctor')
    signup_and_login(client, 'patient')

    assert client.post(f'/employee/approve_doctor/{doctor_id}').status_code == 401
    assert fresh(Doctor, doctor_id).is_approved is False


def test_employee_dashboard(client):
    signup(client, 'doctor')
    signup_and_login(client, 'employee')

    assert client.get('/employee/dashboard').get_json() == {'pendingDoctorRequests': 1}
