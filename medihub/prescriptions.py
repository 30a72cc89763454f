from medihub import db
from medihub.auth import require_approved
from medihub.errors import ForbiddenError, NotFoundError, ValidationError
from medihub.identity import GENDERS, clean_text, display_email, display_name
from medihub.models import Prescription, PrescriptionMedicine
from medihub.persistence import commit

PRESCRIBABLE_STATUSES = ('confirmed', 'completed')
MEDICINE_FIELDS = ('medicineName', 'dosage', 'frequency', 'duration')


def _number(payload, key, cast):
    try:
        value = cast(payload.get(key))
    except (TypeError, ValueError):
        raise ValidationError(details=f'{key} must be a number') from None
    if value <= 0:
        raise ValidationError(details=f'{key} must be positive')
    return value


def _parse_medicines(raw) -> list[PrescriptionMedicine]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError(details='At least one medicine is required')

    lines = []
    for index, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise ValidationError(details=f'Medicine {index} is malformed')
        values = {key: clean_text(item.get(key), key) for key in MEDICINE_FIELDS}
        missing = [key for key, value in values.items() if not value]
        if missing:
            raise ValidationError(details=f'Medicine {index} is missing {", ".join(missing)}')
        lines.append(
            PrescriptionMedicine(
                medicine_name=values['medicineName'],
                dosage=values['dosage'],
                frequency=values['frequency'],
                duration=values['duration'],
                instructions=clean_text(item.get('instructions'), 'instructions') or None,
            )
        )
    return lines


def _parse_details(payload):
    symptoms = clean_text(payload.get('symptoms'), 'symptoms')
    gender = clean_text(payload.get('gender'), 'gender').lower()
    if not symptoms:
        raise ValidationError(details='symptoms is required')
    if gender not in GENDERS:
        raise ValidationError(details=f'gender must be one of: {", ".join(GENDERS)}')
    return {
        'age': _number(payload, 'age', int),
        'weight': _number(payload, 'weight', float),
        'gender': gender,
        'symptoms': symptoms,
        'additional_notes': clean_text(payload.get('additionalNotes'), 'additionalNotes') or None,
    }


def create_prescription(doctor, appointment, payload) -> Prescription:
    """Write a prescription for an appointment the doctor attended."""
    require_approved(doctor)
    if appointment.doctor_id != doctor.id:
        raise ForbiddenError('Not authorized for this appointment')
    if appointment.is_blocked_slot or appointment.status not in PRESCRIBABLE_STATUSES:
        raise ValidationError(details='Prescriptions require a confirmed appointment')

    details = _parse_details(payload)
    prescription = Prescription(
        appointment_id=appointment.id,
        doctor_id=doctor.id,
        patient_id=appointment.patient_id,
        medicines=_parse_medicines(payload.get('medicines')),
        **details,
    )
    db.session.add(prescription)
    commit('create prescription')
    return prescription


def update_prescription(doctor, prescription, payload) -> Prescription:
    if prescription.doctor_id != doctor.id:
        raise ForbiddenError('Not authorized for this prescription')

    for column, value in _parse_details(payload).items():
        setattr(prescription, column, value)
    prescription.medicines = _parse_medicines(payload.get('medicines'))
    commit('update prescription')
    return prescription


def get_visible_prescription(prescription_id, patient_id=None, doctor_id=None) -> Prescription:
    prescription = db.session.get(Prescription, prescription_id)
    if prescription is None:
        raise NotFoundError('Prescription not found')
    if patient_id is not None and prescription.patient_id != patient_id:
        raise ForbiddenError('Not authorized for this prescription')
    if doctor_id is not None and prescription.doctor_id != doctor_id:
        raise ForbiddenError('Not authorized for this prescription')
    return prescription


def serialize(prescription: Prescription) -> dict:
    appointment = prescription.appointment
    return {
        'id': prescription.id,
        'appointmentId': prescription.appointment_id,
        'appointmentDate': appointment.date.isoformat(),
        'appointmentTime': appointment.time,
        'doctorId': prescription.doctor_id,
        'doctorEmail': display_email(prescription.doctor),
        'patientId': prescription.patient_id,
        'patientName': display_name(prescription.patient),
        'patientEmail': display_email(prescription.patient),
        'age': prescription.age,
        'gender': prescription.gender,
        'weight': prescription.weight,
        'symptoms': prescription.symptoms,
        'additionalNotes': prescription.additional_notes,
        'medicines': [
            {
                'medicineName': line.medicine_name,
                'dosage': line.dosage,
                'frequency': line.frequency,
                'duration': line.duration,
                'instructions': line.instructions,
            }
            for line in prescription.medicines
        ],
        'createdAt': prescription.created_at.isoformat() if prescription.created_at else None,
    }


def render_text(prescription: Prescription) -> str:
    """Plain-text copy of a prescription for download."""
    doctor = prescription.doctor
    appointment = prescription.appointment
    lines = [
        'MediHub Prescription',
        f'Prescription #{prescription.id}',
        f'Doctor: {display_name(doctor)} ({doctor.specialization or "General Physician"})',
        f'Patient: {display_name(prescription.patient)}',
        f'Appointment: {appointment.date.isoformat()} {appointment.time}',
        f'Age: {prescription.age}  Gender: {prescription.gender}  Weight: {prescription.weight:g} kg',
        '',
        f'Symptoms: {prescription.symptoms}',
    ]
    if prescription.additional_notes:
        lines.append(f'Notes: {prescription.additional_notes}')
    lines.extend(['', 'Medicines:'])
    for number, line in enumerate(prescription.medicines, start=1):
        entry = f'{number}. {line.medicine_name} - {line.dosage}, {line.frequency}, for {line.duration}'
        if line.instructions:
            entry += f' ({line.instructions})'
        lines.append(entry)
    return '\n'.join(lines) + '\n'
