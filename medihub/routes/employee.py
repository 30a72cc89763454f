from flask import Blueprint, current_app, jsonify

from medihub import identity
from medihub.auth import role_required
from medihub.identity import Role, display_email, display_name
from medihub.routes.accounts import register_account_routes
from medihub.routes.common import parse_id

employee = Blueprint('employee', __name__, url_prefix='/employee')
register_account_routes(employee, Role.EMPLOYEE)


def _doctor_request(doctor):
    return {
        'id': doctor.id,
        'name': display_name(doctor),
        'email': display_email(doctor),
        'registrationNumber': doctor.registration_number,
        'specialization': doctor.specialization,
        'college': doctor.college,
        'yearOfPassing': doctor.year_of_passing,
        'location': doctor.location,
        'createdAt': doctor.created_at.isoformat() if doctor.created_at else None,
    }


@employee.route('/dashboard')
@role_required(Role.EMPLOYEE, page=True)
def dashboard():
    return jsonify({'pendingDoctorRequests': len(identity.pending_doctors())})


@employee.route('/doctor_requests')
@role_required(Role.EMPLOYEE)
def doctor_requests():
    return jsonify({'doctors': [_doctor_request(doctor) for doctor in identity.pending_doctors()]})


@employee.route('/doctor_requests_count')
@role_required(Role.EMPLOYEE)
def doctor_requests_count():
    return jsonify({'count': len(identity.pending_doctors())})


@employee.route('/approve_doctor/<doctor_id>', methods=['POST'])
@role_required(Role.EMPLOYEE)
def approve_doctor(doctor_id):
    doctor, changed = identity.approve_doctor(parse_id(doctor_id, 'doctor ID'))
    if not changed:
        current_app.logger.info('Doctor id=%s was already approved', doctor.id)
        return jsonify({'message': 'Doctor already approved', 'ssn': doctor.ssn, 'redirect': '/employee/dashboard'})
    return jsonify({'message': 'Doctor approved', 'ssn': doctor.ssn, 'redirect': '/employee/dashboard'})
