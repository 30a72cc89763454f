from medihub.models import Appointment, Patient
from tests.helpers import approved_doctor, book, fresh, signup, signup_and_login


def test_users_list_excludes_acting_admin(client):
    signup(client, 'patient')
    signup(client, 'admin', 2)
    admin_id = signup_and_login(client, 'admin')

    users = client.get('/admin/users').get_json()

    assert {(user['type'], user['email']) for user in users} == {
        ('Patient', 'patient1@example.com'),
        ('Admin', 'admin2@example.com'),
    }
    assert all(not (user['type'] == 'Admin' and user['id'] == admin_id) for user in users)


def test_delete_patient_removes_appointments(client):
    doctor_id = approved_doctor(client)
    patient_id = signup_and_login(client, 'patient')
    appointment_id = book(client, doctor_id)
    signup_and_login(client, 'admin')

    response = client.delete(f'/admin/users/patient/{patient_id}')

    assert response.status_code == 200
    assert fresh(Patient, patient_id) is None
    assert fresh(Appointment, appointment_id) is None
    assert Appointment.query.filter_by(patient_id=patient_id).count() == 0


def test_admin_cannot_delete_self(client):
    admin_id = signup_and_login(client, 'admin')

    response = client.delete(f'/admin/users/Admin/{admin_id}')

    assert response.status_code == 403
    assert response.get_json()['error'] == 'Cannot delete own admin account'


def test_admin_deletes_other_admin(client):
    other_id = signup(client, 'admin', 2)
    signup_and_login(client, 'admin')

    assert client.delete(f'/admin/users/admin/{other_id}').status_code == 200


def test_delete_user_bad_input(client):
    signup_and_login(client, 'admin')

    assert client.delete('/admin/users/nurse/1').status_code == 400
    assert client.delete('/admin/users/patient/xyz').status_code == 400
    assert client.delete('/admin/users/patient/77').status_code == 404


def test_get_user(client):
    supplier_id = signup(client, 'supplier')
    signup_and_login(client, 'admin')

    body = client.get(f'/admin/users/supplier/{supplier_id}').get_json()

    assert body['supplierID'] == 'SUP-1'
    assert client.get('/admin/users/supplier/55').status_code == 404


def test_signins_newest_first(client, other_client):
    signup_and_login(other_client, 'patient')
    signup_and_login(other_client, 'doctor')
    signup(client, 'employee')
    signup_and_login(client, 'admin')

    signins = client.get('/admin/api/signins').get_json()

    assert [row['type'] for row in signins] == ['Doctor', 'Patient']


def test_admin_endpoints_require_admin(client):
    signup_and_login(client, 'employee')
    assert client.get('/admin/users').status_code == 401
    assert client.get('/admin/dashboard').status_code == 302


def test_dashboard_counts(client):
    signup(client, 'patient')
    signup(client, 'doctor')
    signup_and_login(client, 'admin')

    stats = client.get('/admin/dashboard').get_json()['stats']

    assert stats['patients'] == 1
    assert stats['doctors'] == 1
    assert stats['admins'] == 1
    assert stats['appointments'] == 0
