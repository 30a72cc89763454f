from datetime import date

from flask import Blueprint, Response, g, jsonify

from medihub import appointments, earnings, prescriptions
from medihub.auth import role_required
from medihub.identity import Role, display_name, profile_data
from medihub.models import Appointment, Prescription
from medihub.routes.accounts import register_account_routes
from medihub.routes.common import get_payload, parse_date, parse_id

doctor = Blueprint('doctor', __name__, url_prefix='/doctor')
register_account_routes(doctor, Role.DOCTOR)


def _own_appointments():
    return (
        Appointment.query.filter_by(doctor_id=g.current_user.id)
        .order_by(Appointment.date.asc(), Appointment.time.asc())
        .all()
    )


@doctor.route('/dashboard')
@role_required(Role.DOCTOR, page=True)
def dashboard():
    current = g.current_user
    today = date.today()
    booked = _own_appointments()
    return jsonify({
        'name': display_name(current),
        'isApproved': current.is_approved,
        'ssn': current.ssn,
        'onlineStatus': current.online_status,
        'upcomingAppointments': sum(1 for appt in booked if appointments.is_upcoming(appt, today)),
        'pendingAppointments': sum(1 for appt in booked if appt.status == 'pending'),
    })


@doctor.route('/appointments')
@role_required(Role.DOCTOR)
def list_appointments():
    return jsonify([appointments.serialize(appt) for appt in _own_appointments()])


@doctor.route('/appointments/upcoming')
@role_required(Role.DOCTOR)
def upcoming_appointments():
    today = date.today()
    return jsonify([
        appointments.serialize(appt) for appt in _own_appointments() if appointments.is_upcoming(appt, today)
    ])


@doctor.route('/appointments/previous')
@role_required(Role.DOCTOR)
def previous_appointments():
    today = date.today()
    return jsonify([
        appointments.serialize(appt)
        for appt in reversed(_own_appointments())
        if not appt.is_blocked_slot and not appointments.is_upcoming(appt, today)
    ])


@doctor.route('/appointments/<int:appointment_id>/confirm', methods=['POST'])
@role_required(Role.DOCTOR)
def confirm_appointment(appointment_id):
    appointment = appointments.get_owned_appointment(Role.DOCTOR, g.current_user, appointment_id)
    appointments.confirm(g.current_user, appointment)
    return jsonify({'message': 'Appointment confirmed', 'appointment': appointments.serialize(appointment)})


@doctor.route('/appointments/<int:appointment_id>/complete', methods=['POST'])
@role_required(Role.DOCTOR)
def complete_appointment(appointment_id):
    appointment = appointments.get_owned_appointment(Role.DOCTOR, g.current_user, appointment_id)
    appointments.complete(g.current_user, appointment)
    return jsonify({'message': 'Appointment completed', 'appointment': appointments.serialize(appointment)})


@doctor.route('/appointments/<int:appointment_id>/cancel', methods=['POST'])
@role_required(Role.DOCTOR)
def cancel_appointment(appointment_id):
    appointment = appointments.get_owned_appointment(Role.DOCTOR, g.current_user, appointment_id)
    appointments.cancel(appointment)
    return jsonify({'message': 'Appointment cancelled', 'appointment': appointments.serialize(appointment)})


@doctor.route('/appointments/block', methods=['POST'])
@role_required(Role.DOCTOR)
def block_slot():
    payload = get_payload()
    slot = appointments.block_slot(
        g.current_user,
        parse_date(payload.get('date'), 'date'),
        payload.get('time'),
        notes=payload.get('notes'),
    )
    return jsonify({'message': 'Slot blocked', 'appointment': appointments.serialize(slot)}), 201


@doctor.route('/api/daily-earnings')
@role_required(Role.DOCTOR)
def daily_earnings():
    totals = earnings.aggregate_earnings(earnings.billable_appointments(doctor_id=g.current_user.id))
    return jsonify(totals['daily'])


@doctor.route('/prescriptions', methods=['GET'])
@role_required(Role.DOCTOR)
def list_prescriptions():
    issued = (
        Prescription.query.filter_by(doctor_id=g.current_user.id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .all()
    )
    return jsonify([prescriptions.serialize(item) for item in issued])


@doctor.route('/prescriptions', methods=['POST'])
@role_required(Role.DOCTOR)
def create_prescription():
    payload = get_payload()
    appointment = appointments.get_owned_appointment(
        Role.DOCTOR, g.current_user, parse_id(payload.get('appointmentId'), 'appointment ID')
    )
    prescription = prescriptions.create_prescription(g.current_user, appointment, payload)
    return jsonify({'message': 'Prescription created', 'prescription': prescriptions.serialize(prescription)}), 201


@doctor.route('/prescriptions/<int:prescription_id>', methods=['GET'])
@role_required(Role.DOCTOR)
def get_prescription(prescription_id):
    prescription = prescriptions.get_visible_prescription(prescription_id, doctor_id=g.current_user.id)
    return jsonify(prescriptions.serialize(prescription))


@doctor.route('/prescriptions/<int:prescription_id>', methods=['PUT'])
@role_required(Role.DOCTOR)
def update_prescription(prescription_id):
    prescription = prescriptions.get_visible_prescription(prescription_id, doctor_id=g.current_user.id)
    prescriptions.update_prescription(g.current_user, prescription, get_payload())
    return jsonify({'message': 'Prescription updated', 'prescription': prescriptions.serialize(prescription)})


@doctor.route('/prescriptions/download/<int:prescription_id>')
@role_required(Role.DOCTOR)
def download_prescription(prescription_id):
    prescription = prescriptions.get_visible_prescription(prescription_id, doctor_id=g.current_user.id)
    return Response(
        prescriptions.render_text(prescription),
        mimetype='text/plain',
        headers={'Content-Disposition': f'attachment; filename=prescription-{prescription.id}.txt'},
    )


@doctor.route('/api/profile')
@role_required(Role.DOCTOR)
def doctor_details():
    return jsonify(profile_data(g.current_user))
