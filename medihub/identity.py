"""Account storage shared by the five roles.

Every account table keeps its own unique index on the email and mobile
lookup hashes, but an email or mobile number may only belong to one account
across *all* roles. That rule lives here: ``contact_in_use`` fans out to
every table and is run on signup and on every profile update.
"""
import re
import secrets
from datetime import datetime
from enum import Enum

from flask import current_app

from medihub import db
from medihub.errors import (
    DuplicateEmailError,
    DuplicateIdError,
    DuplicateMobileError,
    NotFoundError,
    SelfDeleteError,
    UnknownRoleError,
    ValidationError,
)
from medihub.models import Admin, Appointment, Doctor, Employee, Order, Patient, Supplier
from medihub.persistence import commit
from medihub.security.encryption import reveal, seal
from medihub.security.lookup import hash_identity
from medihub.security.passwords import (
    PASSWORD_POLICY_MESSAGE,
    derive_storage_password,
    is_strong_password,
    password_matches,
)


class Role(str, Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    ADMIN = 'admin'
    EMPLOYEE = 'employee'
    SUPPLIER = 'supplier'

    @classmethod
    def parse(cls, tag) -> 'Role':
        if isinstance(tag, cls):
            return tag
        try:
            return cls((tag or '').strip().lower())
        except (AttributeError, ValueError):
            raise UnknownRoleError(details=f'Unknown user type: {tag}') from None

    @property
    def label(self) -> str:
        return self.value.capitalize()


MODEL_BY_ROLE = {
    Role.PATIENT: Patient,
    Role.DOCTOR: Doctor,
    Role.ADMIN: Admin,
    Role.EMPLOYEE: Employee,
    Role.SUPPLIER: Supplier,
}
ROLE_BY_MODEL = {model: role for role, model in MODEL_BY_ROLE.items()}

BASE_FIELDS = ('name', 'email', 'mobile', 'address')

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MOBILE_REGEX = re.compile(r'^\d{10}$')
YEAR_REGEX = re.compile(r'^\d{4}$')
GENDERS = ('male', 'female', 'other')
ONLINE_STATUSES = ('online', 'offline')
SSN_PREFIX = 'DOC-'


def clean_text(value, field) -> str:
    """Stripped text from a request field; '' when absent, 400 when not a string."""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(details=f'{field} must be a string')
    return value.strip()


def _text(value, key):
    return str(value).strip()


def _date(value, key):
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(details=f'{key} must be a date in YYYY-MM-DD format') from None


def _choice(options):
    def parse(value, key):
        normalized = str(value).strip().lower()
        if normalized not in options:
            raise ValidationError(details=f'{key} must be one of: {", ".join(options)}')
        return normalized
    return parse


def _year(value, key):
    year = str(value).strip()
    if not YEAR_REGEX.match(year):
        raise ValidationError(details=f'{key} must be a four digit year')
    return year


def _fee(value, key):
    try:
        fee = float(value)
    except (TypeError, ValueError):
        raise ValidationError(details=f'{key} must be a number') from None
    if fee < 0:
        raise ValidationError(details='Consultation fee cannot be negative')
    return fee


# Per-role extra fields: payload key -> (column, parser, required on signup, editable).
EXTRA_FIELDS = {
    Role.PATIENT: {
        'dob': ('dob', _date, False, True),
        'gender': ('gender', _choice(GENDERS), False, True),
    },
    Role.DOCTOR: {
        'registrationNumber': ('registration_number', _text, True, False),
        'college': ('college', _text, True, False),
        'yearOfPassing': ('year_of_passing', _year, True, False),
        'location': ('location', _text, True, True),
        'specialization': ('specialization', _text, False, True),
        'consultationFee': ('consultation_fee', _fee, False, True),
        'onlineStatus': ('online_status', _choice(ONLINE_STATUSES), False, True),
    },
    Role.ADMIN: {},
    Role.EMPLOYEE: {},
    Role.SUPPLIER: {
        'supplierID': ('supplier_code', _text, True, True),
    },
}

# Columns that must be unique within their own table, with the message used on conflict.
UNIQUE_COLUMNS = {
    Role.DOCTOR: {'registration_number': 'Registration number already in use'},
    Role.SUPPLIER: {'supplier_code': 'Supplier ID already in use'},
}


def signup_fields(role: Role) -> list[str]:
    required = [key for key, spec in EXTRA_FIELDS[role].items() if spec[2]]
    return [*BASE_FIELDS, 'password', *required]


def profile_fields(role: Role) -> list[str]:
    required = [key for key, spec in EXTRA_FIELDS[role].items() if spec[2] and spec[3]]
    return [*BASE_FIELDS, *required]


def _present(value) -> bool:
    return value is not None and str(value).strip() != ''


def _require(fields, keys):
    missing = [key for key in keys if not _present(fields.get(key))]
    if missing:
        raise ValidationError('All fields are required', details=f'Missing {", ".join(missing)}')
    return {key: str(fields[key]).strip() for key in keys}


def _validate_contact(email: str, mobile: str):
    if not EMAIL_REGEX.match(email):
        raise ValidationError(details='Invalid email format')
    if not MOBILE_REGEX.match(mobile):
        raise ValidationError(details='Mobile number must be 10 digits')


def _parse_extras(role: Role, fields, editable_only=False):
    values = {}
    for key, (column, parser, _required, editable) in EXTRA_FIELDS[role].items():
        if editable_only and not editable:
            continue
        if _present(fields.get(key)):
            values[column] = parser(fields[key], key)
    return values


def contact_in_use(field: str, value: str | None, exclude: tuple[Role, int] | None = None) -> bool:
    """Return True when any account of any role already holds this email or mobile.

    ``exclude`` is the ``(role, id)`` of the account being edited. Ids are only
    unique per table, so the role is part of the exclusion.
    """
    if field not in ('email', 'mobile'):
        raise ValueError(f'Unsupported contact field: {field}')

    lookup = hash_identity(value)
    if lookup is None:
        return False

    for role, model in MODEL_BY_ROLE.items():
        query = model.query.filter(getattr(model, f'{field}_lookup') == lookup)
        if exclude is not None and exclude[0] is role:
            query = query.filter(model.id != exclude[1])
        if query.first() is not None:
            return True
    return False


def _ensure_unique_contacts(email, mobile, exclude=None):
    if contact_in_use('email', email, exclude):
        raise DuplicateEmailError(details='This email is already registered with another account')
    if contact_in_use('mobile', mobile, exclude):
        raise DuplicateMobileError(details='This mobile number is already registered with another account')


def _ensure_unique_ids(role: Role, values, exclude_id=None):
    model = MODEL_BY_ROLE[role]
    for column, message in UNIQUE_COLUMNS.get(role, {}).items():
        if column not in values:
            continue
        query = model.query.filter(getattr(model, column) == values[column])
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is not None:
            raise DuplicateIdError(details=message)


def _apply_contact(principal, values):
    seal(principal, values)
    principal.email_lookup = hash_identity(values['email'])
    principal.mobile_lookup = hash_identity(values['mobile'])


def create_principal(role, fields):
    role = Role.parse(role)
    values = _require(fields, signup_fields(role))
    _validate_contact(values['email'], values['mobile'])
    if not is_strong_password(values['password']):
        raise ValidationError(details=PASSWORD_POLICY_MESSAGE)
    extras = _parse_extras(role, fields)

    _ensure_unique_contacts(values['email'], values['mobile'])
    _ensure_unique_ids(role, extras)

    principal = MODEL_BY_ROLE[role](password_hash=derive_storage_password(values['password']), **extras)
    _apply_contact(principal, values)
    db.session.add(principal)
    commit(f'create {role.value}', conflict=DuplicateIdError(details='Account details already in use'))

    current_app.logger.info('Created %s account id=%s', role.value, principal.id)
    return principal


def get_principal(role, principal_id):
    return db.session.get(MODEL_BY_ROLE[Role.parse(role)], principal_id)


def find_by_credentials(role, email, password):
    """Return the matching account, or None when the email or password is wrong."""
    lookup = hash_identity(email)
    if lookup is None or not password:
        return None

    model = MODEL_BY_ROLE[Role.parse(role)]
    principal = model.query.filter_by(email_lookup=lookup).first()
    if principal is None or not password_matches(principal, password):
        return None
    return principal


def update_profile(role, principal_id, fields):
    role = Role.parse(role)
    principal = get_principal(role, principal_id)
    if principal is None:
        raise NotFoundError(f'{role.label} not found')

    values = _require(fields, profile_fields(role))
    _validate_contact(values['email'], values['mobile'])
    extras = _parse_extras(role, fields, editable_only=True)

    password = clean_text(fields.get('password'), 'password')
    if password and not is_strong_password(password):
        raise ValidationError(details=PASSWORD_POLICY_MESSAGE)

    _ensure_unique_contacts(values['email'], values['mobile'], exclude=(role, principal.id))
    _ensure_unique_ids(role, extras, exclude_id=principal.id)

    _apply_contact(principal, values)
    for column, value in extras.items():
        setattr(principal, column, value)
    if password:
        principal.password_hash = derive_storage_password(password)

    commit(f'update {role.value} profile', conflict=DuplicateIdError(details='Account details already in use'))
    return principal


def delete_principal(role, principal_id, acting: tuple[Role, int] | None = None):
    """Remove an account together with the records that cannot outlive it."""
    role = Role.parse(role)
    if role is Role.ADMIN and acting is not None and acting == (Role.ADMIN, principal_id):
        raise SelfDeleteError()

    principal = get_principal(role, principal_id)
    if principal is None:
        raise NotFoundError('User not found')

    if role is Role.PATIENT:
        for appointment in Appointment.query.filter_by(patient_id=principal.id).all():
            db.session.delete(appointment)
        for order in Order.query.filter_by(patient_id=principal.id).all():
            db.session.delete(order)
    elif role is Role.DOCTOR:
        for appointment in Appointment.query.filter_by(doctor_id=principal.id).all():
            db.session.delete(appointment)

    db.session.delete(principal)
    commit(f'delete {role.value}')
    current_app.logger.info('Deleted %s account id=%s', role.value, principal_id)


def generate_ssn() -> str:
    return f'{SSN_PREFIX}{secrets.randbelow(900_000_000) + 100_000_000}'


def pending_doctors():
    return Doctor.query.filter_by(is_approved=False).order_by(Doctor.created_at.asc(), Doctor.id.asc()).all()


def approve_doctor(doctor_id):
    """Approve a pending doctor and issue its SSN.

    Approval is one-way; approving an approved doctor changes nothing and the
    second return value is False.
    """
    doctor = db.session.get(Doctor, doctor_id)
    if doctor is None:
        raise NotFoundError('Doctor not found')
    if doctor.is_approved:
        return doctor, False

    doctor.is_approved = True
    doctor.ssn = generate_ssn()
    commit('approve doctor')
    current_app.logger.info('Approved doctor id=%s', doctor.id)
    return doctor, True


def _iso(value):
    return value.isoformat() if value is not None else None


def display_name(principal) -> str:
    return reveal(principal, 'name')


def display_email(principal) -> str:
    return reveal(principal, 'email')


def profile_data(principal) -> dict:
    role = ROLE_BY_MODEL[type(principal)]
    data = {
        'id': principal.id,
        'type': role.label,
        'name': display_name(principal),
        'email': display_email(principal),
        'mobile': reveal(principal, 'mobile'),
        'address': reveal(principal, 'address'),
        'lastLogin': _iso(principal.last_login),
        'createdAt': _iso(principal.created_at),
    }
    if role is Role.PATIENT:
        data.update(dob=_iso(principal.dob), gender=principal.gender)
    elif role is Role.DOCTOR:
        data.update(
            isApproved=principal.is_approved,
            ssn=principal.ssn,
            registrationNumber=principal.registration_number,
            specialization=principal.specialization,
            college=principal.college,
            yearOfPassing=principal.year_of_passing,
            location=principal.location,
            onlineStatus=principal.online_status,
            consultationFee=principal.consultation_fee,
        )
    elif role is Role.SUPPLIER:
        data['supplierID'] = principal.supplier_code
    return data


def _all_principals(exclude=None):
    for role, model in MODEL_BY_ROLE.items():
        for principal in model.query.order_by(model.id.asc()).all():
            if exclude is not None and exclude == (role, principal.id):
                continue
            yield role, principal


def list_principals(exclude=None) -> list[dict]:
    return [
        {
            'id': principal.id,
            'type': role.label,
            'name': display_name(principal),
            'email': display_email(principal),
        }
        for role, principal in _all_principals(exclude)
    ]


def recent_signins(exclude=None, limit=50) -> list[dict]:
    signed_in = [(role, p) for role, p in _all_principals(exclude) if p.last_login is not None]
    signed_in.sort(key=lambda item: item[1].last_login, reverse=True)
    return [
        {
            'name': display_name(principal),
            'type': role.label,
            'email': display_email(principal),
            'date': principal.last_login.strftime('%Y-%m-%d'),
            'time': principal.last_login.strftime('%H:%M:%S'),
            'lastLogin': _iso(principal.last_login),
        }
        for role, principal in signed_in[:limit]
    ]
