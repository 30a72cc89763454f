from datetime import date

from flask import Blueprint, g, jsonify

from medihub import appointments, inventory, prescriptions
from medihub.auth import role_required
from medihub.identity import Role, display_name
from medihub.models import Appointment, Doctor, Medicine, Order, Prescription
from medihub.routes.accounts import register_account_routes
from medihub.routes.common import get_payload, parse_date, parse_id

patient = Blueprint('patient', __name__, url_prefix='/patient')
register_account_routes(patient, Role.PATIENT)


@patient.route('/dashboard')
@role_required(Role.PATIENT, page=True)
def dashboard():
    current = g.current_user
    today = date.today()
    booked = Appointment.query.filter_by(patient_id=current.id).all()
    return jsonify({
        'name': display_name(current),
        'upcomingAppointments': sum(1 for appt in booked if appointments.is_upcoming(appt, today)),
        'prescriptions': Prescription.query.filter_by(patient_id=current.id).count(),
        'orders': Order.query.filter_by(patient_id=current.id).count(),
    })


@patient.route('/doctors')
@role_required(Role.PATIENT)
def list_doctors():
    doctors = Doctor.query.filter_by(is_approved=True).order_by(Doctor.id.asc()).all()
    return jsonify([
        {
            'id': doctor.id,
            'name': display_name(doctor),
            'specialization': doctor.specialization or 'General Physician',
            'location': doctor.location,
            'consultationFee': doctor.consultation_fee,
            'onlineStatus': doctor.online_status,
        }
        for doctor in doctors
    ])


@patient.route('/appointments', methods=['GET'])
@role_required(Role.PATIENT)
def list_appointments():
    booked = (
        Appointment.query.filter_by(patient_id=g.current_user.id)
        .order_by(Appointment.date.asc(), Appointment.time.asc())
        .all()
    )
    return jsonify([appointments.serialize(appt) for appt in booked])


@patient.route('/appointments', methods=['POST'])
@role_required(Role.PATIENT)
def book_appointment():
    payload = get_payload()
    appointment = appointments.book(
        g.current_user,
        parse_id(payload.get('doctorId'), 'doctor ID'),
        parse_date(payload.get('date'), 'date'),
        payload.get('time'),
        payload.get('type'),
        notes=payload.get('notes'),
    )
    return jsonify({'message': 'Appointment booked', 'appointment': appointments.serialize(appointment)}), 201


@patient.route('/appointments/<int:appointment_id>/cancel', methods=['POST'])
@role_required(Role.PATIENT)
def cancel_appointment(appointment_id):
    appointment = appointments.get_owned_appointment(Role.PATIENT, g.current_user, appointment_id)
    appointments.cancel(appointment)
    return jsonify({'message': 'Appointment cancelled', 'appointment': appointments.serialize(appointment)})


@patient.route('/prescriptions')
@role_required(Role.PATIENT)
def list_prescriptions():
    issued = (
        Prescription.query.filter_by(patient_id=g.current_user.id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .all()
    )
    return jsonify([prescriptions.serialize(item) for item in issued])


@patient.route('/prescriptions/<int:prescription_id>')
@role_required(Role.PATIENT)
def get_prescription(prescription_id):
    prescription = prescriptions.get_visible_prescription(prescription_id, patient_id=g.current_user.id)
    return jsonify(prescriptions.serialize(prescription))


@patient.route('/medicines')
@role_required(Role.PATIENT)
def list_medicines():
    stock = Medicine.query.filter(Medicine.quantity > 0).order_by(Medicine.name.asc()).all()
    return jsonify([inventory.serialize_medicine(medicine) for medicine in stock])


@patient.route('/orders', methods=['GET'])
@role_required(Role.PATIENT)
def list_orders():
    placed = (
        Order.query.filter_by(patient_id=g.current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return jsonify([inventory.serialize_order(order) for order in placed])


@patient.route('/orders', methods=['POST'])
@role_required(Role.PATIENT)
def place_order():
    payload = get_payload()
    order = inventory.place_order(
        g.current_user,
        parse_id(payload.get('medicineId'), 'medicine ID'),
        payload.get('quantity'),
    )
    return jsonify({'message': 'Order placed', 'order': inventory.serialize_order(order)}), 201
