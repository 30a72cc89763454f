from datetime import date
from types import SimpleNamespace

from medihub import db
from medihub.earnings import aggregate_earnings, platform_cut
from medihub.models import Appointment
from tests.helpers import approved_doctor, signup, signup_and_login


def _visit(fee, day, status='confirmed', blocked=False):
    return SimpleNamespace(
        consultation_fee=fee,
        date=date.fromisoformat(day),
        status=status,
        is_blocked_slot=blocked,
    )


def test_groups_by_day_month_and_year():
    totals = aggregate_earnings([
        _visit(50, '2025-02-01'),
        _visit(100, '2025-01-10'),
        _visit(200, '2025-01-10'),
    ])

    assert totals['daily'] == [
        {'date': '2025-01-10', 'count': 2, 'totalFees': 300, 'totalRevenue': 30.0},
        {'date': '2025-02-01', 'count': 1, 'totalFees': 50, 'totalRevenue': 5.0},
    ]
    assert [(row['month'], row['totalFees']) for row in totals['monthly']] == [('2025-01', 300), ('2025-02', 50)]
    assert totals['yearly'] == [{'year': 2025, 'count': 3, 'totalFees': 350, 'totalRevenue': 35.0}]


def test_skips_blocked_cancelled_and_out_of_range():
    totals = aggregate_earnings(
        [
            _visit(100, '2025-03-01'),
            _visit(100, '2025-03-01', status='cancelled'),
            _visit(None, '2025-03-01', status='blocked', blocked=True),
            _visit(100, '2024-12-31'),
        ],
        start=date(2025, 1, 1),
        end=date(2025, 12, 31),
    )

    assert totals['daily'] == [{'date': '2025-03-01', 'count': 1, 'totalFees': 100, 'totalRevenue': 10.0}]


def test_empty_input():
    assert aggregate_earnings([]) == {'daily': [], 'monthly': [], 'yearly': []}


def test_platform_cut_rounds():
    assert platform_cut(333.33) == 33.33
    assert platform_cut(None) == 0


def test_admin_earnings_and_appointments_api(client):
    doctor_id = approved_doctor(client)
    patient_id = signup(client, 'patient')
    rows = [
        ('2025-01-10', '09:00', 100, 'completed', False),
        ('2025-01-10', '10:00', 200, 'confirmed', False),
        ('2025-02-01', '09:00', 50, 'pending', False),
        ('2025-02-02', '09:00', 500, 'cancelled', False),
        ('2025-02-03', '09:00', None, 'blocked', True),
    ]
    for day, time, fee, status, blocked in rows:
        db.session.add(Appointment(
            patient_id=None if blocked else patient_id, doctor_id=doctor_id, date=date.fromisoformat(day),
            time=time, type=None if blocked else 'online', consultation_fee=fee, status=status,
            is_blocked_slot=blocked,
        ))
    db.session.commit()
    signup_and_login(client, 'admin')

    totals = client.get('/admin/api/earnings?startDate=2025-01-01&endDate=2025-12-31').get_json()
    assert [(row['date'], row['totalFees'], row['totalRevenue']) for row in totals['daily']] == [
        ('2025-01-10', 300, 30.0),
        ('2025-02-01', 50, 5.0),
    ]
    assert [row['month'] for row in totals['monthly']] == ['2025-01', '2025-02']

    listed = client.get('/admin/api/appointments?startDate=2025-01-01&endDate=2025-01-31').get_json()
    assert [(row['date'], row['time'], row['fee'], row['revenue']) for row in listed] == [
        ('2025-01-10', '09:00', 100, 10.0),
        ('2025-01-10', '10:00', 200, 20.0),
    ]
    assert listed[0]['specialization'] == 'Cardiology'


def test_admin_earnings_rejects_bad_dates(client):
    signup_and_login(client, 'admin')
    assert client.get('/admin/api/earnings?startDate=January').status_code == 400
