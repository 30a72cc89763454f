import pytest

from medihub.models import Medicine
from tests.helpers import fresh, login, signup_and_login

MEDICINE = {
    'name': 'Paracetamol',
    'medicineID': 'MED-001',
    'quantity': 20,
    'cost': 2.5,
    'manufacturer': 'Acme Labs',
    'expiryDate': '2030-06-30',
}


@pytest.fixture
def medicine_id(client):
    signup_and_login(client, 'supplier')
    response = client.post('/supplier/api/add-medicine', json=MEDICINE)
    assert response.status_code == 201
    return response.get_json()['medicine']['id']


def test_add_and_list_medicines(client, medicine_id):
    listed = client.get('/supplier/api/medicines').get_json()

    assert [item['medicineID'] for item in listed] == ['MED-001']
    assert listed[0]['cost'] == '2.50'
    assert client.get(f'/supplier/api/medicines/{medicine_id}').get_json()['name'] == 'Paracetamol'


@pytest.mark.parametrize('overrides, error', [
    ({'quantity': -1}, 'Invalid input'),
    ({'cost': 'cheap'}, 'Invalid input'),
    ({'manufacturer': ''}, 'All fields are required'),
    ({'expiryDate': '30-06-2030'}, 'Invalid input'),
])
def test_add_medicine_validation(client, overrides, error):
    signup_and_login(client, 'supplier')
    response = client.post('/supplier/api/add-medicine', json=dict(MEDICINE, **overrides))
    assert response.status_code == 400
    assert response.get_json()['error'] == error


def test_duplicate_medicine_id(client, medicine_id):
    response = client.post('/supplier/api/add-medicine', json=MEDICINE)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Medicine ID already exists'


def test_suppliers_only_see_their_own_stock(client, other_client, medicine_id):
    signup_and_login(other_client, 'supplier', 2)

    assert other_client.get('/supplier/api/medicines').get_json() == []
    assert other_client.delete(f'/supplier/api/medicines/{medicine_id}').status_code == 404
    assert other_client.delete('/supplier/api/medicines/abc').status_code == 400

    assert client.delete(f'/supplier/api/medicines/{medicine_id}').status_code == 200
    assert fresh(Medicine, medicine_id) is None


def test_patient_order_flow(client, other_client, medicine_id):
    signup_and_login(other_client, 'patient')
    assert [item['id'] for item in other_client.get('/patient/medicines').get_json()] == [medicine_id]

    placed = other_client.post('/patient/orders', json={'medicineId': medicine_id, 'quantity': 4})
    assert placed.status_code == 201
    order = placed.get_json()['order']
    assert order['totalCost'] == 10.0
    assert order['status'] == 'pending'
    assert fresh(Medicine, medicine_id).quantity == 16

    too_many = other_client.post('/patient/orders', json={'medicineId': medicine_id, 'quantity': 100})
    assert too_many.status_code == 400

    received = client.get('/supplier/api/orders').get_json()
    assert [(item['medicine'], item['patient'], item['quantity']) for item in received] == [('Paracetamol', 'Patient 1', 4)]

    cancelled = client.post(f"/supplier/api/orders/{order['id']}/status", json={'status': 'cancelled'})
    assert cancelled.get_json()['order']['status'] == 'cancelled'
    assert fresh(Medicine, medicine_id).quantity == 20

    reopened = client.post(f"/supplier/api/orders/{order['id']}/status", json={'status': 'shipped'})
    assert reopened.status_code == 400


def test_order_lifecycle(client, other_client, medicine_id):
    signup_and_login(other_client, 'patient')
    order_id = other_client.post('/patient/orders', json={'medicineId': medicine_id, 'quantity': 1}).get_json()['order']['id']

    for status in ('shipped', 'delivered'):
        response = client.post(f'/supplier/api/orders/{order_id}/status', json={'status': status})
        assert response.get_json()['order']['status'] == status

    assert [item['status'] for item in other_client.get('/patient/orders').get_json()] == ['delivered']


def test_supplier_dashboard(client, medicine_id):
    login(client, 'supplier')
    body = client.get('/supplier/dashboard').get_json()
    assert body['medicines'] == 1
    assert body['supplierID'] == 'SUP-1'
