from datetime import date

from flask import Blueprint, current_app, g, jsonify, request

from medihub import config, earnings, identity
from medihub.appointments import serialize as serialize_appointment
from medihub.auth import role_required
from medihub.errors import NotFoundError
from medihub.identity import MODEL_BY_ROLE, Role
from medihub.models import Appointment
from medihub.routes.accounts import register_account_routes
from medihub.routes.common import parse_date, parse_id

admin = Blueprint('admin', __name__, url_prefix='/admin')
register_account_routes(admin, Role.ADMIN)


def _acting():
    return (Role.ADMIN, g.current_user.id)


def _date_range(default_start=None, default_end=None):
    start = parse_date(request.args.get('startDate'), 'startDate', required=False) or default_start
    end = parse_date(request.args.get('endDate'), 'endDate', required=False) or default_end
    return start, end


@admin.route('/dashboard')
@role_required(Role.ADMIN, page=True)
def dashboard():
    stats = {f'{role.value}s': model.query.count() for role, model in MODEL_BY_ROLE.items()}
    stats['appointments'] = Appointment.query.filter_by(is_blocked_slot=False).count()
    return jsonify({'stats': stats})


@admin.route('/users')
@role_required(Role.ADMIN)
def list_users():
    return jsonify(identity.list_principals(exclude=_acting()))


@admin.route('/users/<user_type>/<user_id>', methods=['GET'])
@role_required(Role.ADMIN)
def get_user(user_type, user_id):
    role = Role.parse(user_type)
    principal = identity.get_principal(role, parse_id(user_id, 'user ID'))
    if principal is None:
        raise NotFoundError('User not found')
    return jsonify(identity.profile_data(principal))


@admin.route('/users/<user_type>/<user_id>', methods=['DELETE'])
@role_required(Role.ADMIN)
def delete_user(user_type, user_id):
    role = Role.parse(user_type)
    identity.delete_principal(role, parse_id(user_id, 'user ID'), acting=_acting())
    current_app.logger.info('Admin id=%s deleted %s id=%s', g.current_user.id, role.value, user_id)
    return jsonify({'message': 'User deleted successfully'})


@admin.route('/api/appointments')
@role_required(Role.ADMIN)
def list_appointments():
    start, end = _date_range()
    rows = []
    for appointment in earnings.billable_appointments(start, end):
        row = serialize_appointment(appointment)
        row['fee'] = appointment.consultation_fee or 0
        row['revenue'] = earnings.platform_cut(appointment.consultation_fee)
        row['specialization'] = appointment.doctor.specialization or 'General Physician'
        rows.append(row)
    return jsonify(rows)


@admin.route('/api/earnings')
@role_required(Role.ADMIN)
def get_earnings():
    start, end = _date_range(config.EARNINGS_START_DATE, date.today())
    return jsonify(earnings.aggregate_earnings(earnings.billable_appointments(start, end), start, end))


@admin.route('/api/signins')
@role_required(Role.ADMIN)
def get_signins():
    return jsonify(identity.recent_signins(exclude=_acting(), limit=config.SIGNIN_LIMIT))
