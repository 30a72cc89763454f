import hmac
from functools import wraps

from flask import current_app, g, redirect, session

from medihub.errors import (
    AuthenticationError,
    DoctorNotApprovedError,
    InvalidSecurityCodeError,
    SessionInvalidError,
    UnauthorizedError,
)
from medihub.identity import Role, find_by_credentials, get_principal
from medihub.models import utcnow
from medihub.persistence import commit

SESSION_KEYS = {role: f'{role.value}_id' for role in Role}

SECURITY_CODE_SETTINGS = {
    Role.ADMIN: 'ADMIN_SECURITY_CODE',
    Role.EMPLOYEE: 'EMPLOYEE_SECURITY_CODE',
    Role.SUPPLIER: 'SUPPLIER_SECURITY_CODE',
}


def login_form(role: Role) -> str:
    return f'/{role.value}/form'


def home_page(role: Role) -> str:
    return f'/{role.value}/dashboard'


def requires_security_code(role: Role) -> bool:
    return role in SECURITY_CODE_SETTINGS


def check_security_code(role, code):
    role = Role.parse(role)
    setting = SECURITY_CODE_SETTINGS.get(role)
    if setting is None:
        return
    expected = current_app.config[setting]
    if not code or not hmac.compare_digest(str(code).encode(), expected.encode()):
        raise InvalidSecurityCodeError(details='The provided security code is incorrect')


def login(role, principal):
    """Bind the session to one account; identifiers of other roles are dropped."""
    role = Role.parse(role)
    principal.last_login = utcnow()
    commit('record login')

    session.clear()
    session[SESSION_KEYS[role]] = principal.id
    session.permanent = True
    current_app.logger.info('%s id=%s logged in', role.value, principal.id)


def authenticate(role, email, password):
    role = Role.parse(role)
    principal = find_by_credentials(role, email, password)
    if principal is None:
        current_app.logger.warning('Rejected %s login attempt', role.value)
        raise AuthenticationError(details='Incorrect email or password')
    login(role, principal)
    return principal


def logout():
    session.clear()


def _parse_session_id(raw):
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def require_auth(role):
    role = Role.parse(role)
    principal_id = _parse_session_id(session.get(SESSION_KEYS[role]))
    if principal_id is None:
        raise UnauthorizedError(details='Please log in first', redirect=login_form(role))

    principal = get_principal(role, principal_id)
    if principal is None:
        session.clear()
        raise SessionInvalidError(details=f'{role.label} account no longer exists', redirect=login_form(role))
    return principal


def current_principal():
    """Resolve whichever role identifier the session holds, or (None, None)."""
    for role, key in SESSION_KEYS.items():
        if key in session:
            try:
                return role, require_auth(role)
            except UnauthorizedError:
                return None, None
    return None, None


def role_required(role, page=False):
    role = Role.parse(role)

    def decorator(view_func):
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            try:
                g.current_user = require_auth(role)
            except UnauthorizedError:
                if page:
                    return redirect(f'{login_form(role)}?error=login_required')
                raise
            return view_func(*args, **kwargs)

        return wrapped

    return decorator


def require_approved(doctor):
    if not doctor.is_approved:
        raise DoctorNotApprovedError(details='An employee must approve this account first')
