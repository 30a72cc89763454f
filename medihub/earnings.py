from datetime import date

from medihub.config import PLATFORM_FEE_RATE
from medihub.models import Appointment

PERIODS = (
    ('daily', 'date', lambda day: day.isoformat()),
    ('monthly', 'month', lambda day: day.strftime('%Y-%m')),
    ('yearly', 'year', lambda day: day.year),
)


def is_billable(appointment) -> bool:
    return not appointment.is_blocked_slot and appointment.status != 'cancelled'


def billable_appointments(start: date | None = None, end: date | None = None, doctor_id=None):
    query = Appointment.query.filter(
        Appointment.is_blocked_slot.is_(False),
        Appointment.status != 'cancelled',
    )
    if start is not None:
        query = query.filter(Appointment.date >= start)
    if end is not None:
        query = query.filter(Appointment.date <= end)
    if doctor_id is not None:
        query = query.filter(Appointment.doctor_id == doctor_id)
    return query.order_by(Appointment.date.asc(), Appointment.time.asc()).all()


def platform_cut(fee, rate=PLATFORM_FEE_RATE) -> float:
    return round((fee or 0) * rate, 2)


def aggregate_earnings(appointments, start=None, end=None, rate=PLATFORM_FEE_RATE) -> dict:
    """Group billable appointments into daily, monthly and yearly totals.

    Each entry carries ``count``, ``totalFees`` and ``totalRevenue`` (the
    platform's share of the fees). Every list is sorted ascending by its key.
    """
    buckets = {name: {} for name, _, _ in PERIODS}

    for appointment in appointments:
        if not is_billable(appointment):
            continue
        if start is not None and appointment.date < start:
            continue
        if end is not None and appointment.date > end:
            continue

        fee = appointment.consultation_fee or 0
        for name, label, key_for in PERIODS:
            key = key_for(appointment.date)
            entry = buckets[name].setdefault(key, {label: key, 'count': 0, 'totalFees': 0})
            entry['count'] += 1
            entry['totalFees'] += fee

    result = {}
    for name, _, _ in PERIODS:
        entries = []
        for key in sorted(buckets[name]):
            entry = buckets[name][key]
            entry['totalFees'] = round(entry['totalFees'], 2)
            entry['totalRevenue'] = platform_cut(entry['totalFees'], rate)
            entries.append(entry)
        result[name] = entries
    return result
