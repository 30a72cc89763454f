import re
from datetime import date

from medihub import db
from medihub.auth import require_approved
from medihub.errors import ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError
from medihub.identity import Role, clean_text, display_name
from medihub.models import Appointment, Doctor
from medihub.persistence import commit

TIME_REGEX = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
APPOINTMENT_TYPES = ('online', 'offline')
ACTIVE_STATUSES = ('pending', 'confirmed')

TRANSITIONS = {
    'pending': {'confirmed', 'cancelled'},
    'confirmed': {'completed', 'cancelled'},
    'blocked': {'cancelled'},
    'completed': set(),
    'cancelled': set(),
}


def transition(appointment: Appointment, new_status: str) -> Appointment:
    if new_status not in TRANSITIONS.get(appointment.status, set()):
        raise InvalidTransitionError(
            details=f'Cannot move appointment from {appointment.status} to {new_status}'
        )
    appointment.status = new_status
    return appointment


def validate_time(value) -> str:
    slot = clean_text(value, 'time')
    if not TIME_REGEX.match(slot):
        raise ValidationError(details='time must be in HH:MM format')
    return slot


def slot_is_blocked(doctor_id: int, day: date, time: str) -> bool:
    return (
        Appointment.query.filter_by(
            doctor_id=doctor_id, date=day, time=time, is_blocked_slot=True, status='blocked'
        ).first()
        is not None
    )


def book(patient, doctor_id: int, day: date, time: str, appointment_type: str, notes=None) -> Appointment:
    doctor = db.session.get(Doctor, doctor_id)
    # Unapproved doctors are not visible to patients.
    if doctor is None or not doctor.is_approved:
        raise NotFoundError('Doctor not found')

    time = validate_time(time)
    appointment_type = clean_text(appointment_type, 'type').lower()
    if appointment_type not in APPOINTMENT_TYPES:
        raise ValidationError(details='type must be online or offline')
    if slot_is_blocked(doctor.id, day, time):
        raise ValidationError('Slot unavailable', details='The doctor has blocked this time slot')

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=day,
        time=time,
        type=appointment_type,
        consultation_fee=doctor.consultation_fee,
        notes=notes,
        status='pending',
    )
    db.session.add(appointment)
    commit('book appointment')
    return appointment


def block_slot(doctor, day: date, time: str, notes=None) -> Appointment:
    time = validate_time(time)
    if slot_is_blocked(doctor.id, day, time):
        raise ValidationError('Slot already blocked')

    appointment = Appointment(
        doctor_id=doctor.id,
        date=day,
        time=time,
        notes=notes,
        status='blocked',
        is_blocked_slot=True,
    )
    db.session.add(appointment)
    commit('block slot')
    return appointment


def get_owned_appointment(role: Role, principal, appointment_id) -> Appointment:
    """Load an appointment the given patient or doctor takes part in."""
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFoundError('Appointment not found')

    owner_id = appointment.patient_id if role is Role.PATIENT else appointment.doctor_id
    if role not in (Role.PATIENT, Role.DOCTOR) or owner_id != principal.id:
        raise ForbiddenError('Not authorized for this appointment')
    return appointment


def confirm(doctor, appointment: Appointment) -> Appointment:
    require_approved(doctor)
    transition(appointment, 'confirmed')
    commit('confirm appointment')
    return appointment


def complete(doctor, appointment: Appointment) -> Appointment:
    require_approved(doctor)
    transition(appointment, 'completed')
    commit('complete appointment')
    return appointment


def cancel(appointment: Appointment) -> Appointment:
    transition(appointment, 'cancelled')
    commit('cancel appointment')
    return appointment


def is_upcoming(appointment: Appointment, today: date) -> bool:
    return appointment.date >= today and appointment.status in ACTIVE_STATUSES


def serialize(appointment: Appointment) -> dict:
    return {
        'id': appointment.id,
        'patientId': appointment.patient_id,
        'patientName': display_name(appointment.patient) if appointment.patient else None,
        'doctorId': appointment.doctor_id,
        'doctorName': display_name(appointment.doctor) if appointment.doctor else None,
        'date': appointment.date.isoformat(),
        'time': appointment.time,
        'status': appointment.status,
        'type': appointment.type,
        'consultationFee': appointment.consultation_fee,
        'notes': appointment.notes,
        'isBlockedSlot': appointment.is_blocked_slot,
    }
