from medihub import db
from medihub.identity import approve_doctor

PASSWORD = 'Str0ng!Pass'
SECURITY_CODES = {
    'admin': 'ADMIN-TEST',
    'employee': 'EMPLOYEE-TEST',
    'supplier': 'SUPPLIER-TEST',
}
ROLE_DIGITS = {'patient': 1, 'doctor': 2, 'admin': 3, 'employee': 4, 'supplier': 5}


def email_for(role, n=1):
    return f'{role}{n}@example.com'


def mobile_for(role, n=1):
    return f'9{ROLE_DIGITS[role]}{n:08d}'


def account_payload(role, n=1, **overrides):
    payload = {
        'name': f'{role.title()} {n}',
        'email': email_for(role, n),
        'mobile': mobile_for(role, n),
        'address': f'{n} Main Street',
        'password': PASSWORD,
    }
    if role == 'doctor':
        payload.update(
            registrationNumber=f'REG-{n}',
            college='City Medical College',
            yearOfPassing='2015',
            location='Pune',
            specialization='Cardiology',
            consultationFee=100,
        )
    if role == 'supplier':
        payload['supplierID'] = f'SUP-{n}'
    if role in SECURITY_CODES:
        payload['securityCode'] = SECURITY_CODES[role]
    payload.update(overrides)
    return payload


def signup(client, role, n=1, **overrides):
    response = client.post(f'/{role}/signup', json=account_payload(role, n, **overrides))
    assert response.status_code == 201, response.get_json()
    return response.get_json()['id']


def login(client, role, n=1, email=None, password=PASSWORD):
    body = {'email': email or email_for(role, n), 'password': password}
    if role in SECURITY_CODES:
        body['securityCode'] = SECURITY_CODES[role]
    return client.post(f'/{role}/login', json=body)


def signup_and_login(client, role, n=1, **overrides):
    principal_id = signup(client, role, n, **overrides)
    response = login(client, role, n, email=overrides.get('email'))
    assert response.status_code == 200, response.get_json()
    return principal_id


def approved_doctor(client, n=1, **overrides):
    doctor_id = signup(client, 'doctor', n, **overrides)
    approve_doctor(doctor_id)
    return doctor_id


def fresh(model, pk):
    db.session.expire_all()
    return db.session.get(model, pk)


def book(client, doctor_id, day='2030-01-10', time='10:00', kind='online'):
    response = client.post('/patient/appointments', json={
        'doctorId': doctor_id,
        'date': day,
        'time': time,
        'type': kind,
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()['appointment']['id']
