from flask import jsonify
from werkzeug.exceptions import HTTPException


class MediHubError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, details=None, redirect=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details
        self.redirect = redirect

    def to_dict(self):
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        if self.redirect:
            body['redirect'] = self.redirect
        return body


class ValidationError(MediHubError):
    status_code = 400
    default_message = 'Validation Error'


class UnknownRoleError(ValidationError):
    default_message = 'Invalid user type'


class InvalidTransitionError(ValidationError):
    default_message = 'Invalid appointment status change'


class DuplicateEmailError(ValidationError):
    default_message = 'Email already in use'


class DuplicateMobileError(ValidationError):
    default_message = 'Mobile number already in use'


class DuplicateIdError(ValidationError):
    default_message = 'Identifier already in use'


class InvalidSecurityCodeError(ValidationError):
    default_message = 'Invalid security code'


class UnauthorizedError(MediHubError):
    status_code = 401
    default_message = 'Unauthorized'


class AuthenticationError(UnauthorizedError):
    default_message = 'Invalid email or password'


class SessionInvalidError(UnauthorizedError):
    default_message = 'Invalid session data'


class ForbiddenError(MediHubError):
    status_code = 403
    default_message = 'Forbidden'


class SelfDeleteError(ForbiddenError):
    default_message = 'Cannot delete own admin account'


class DoctorNotApprovedError(ForbiddenError):
    default_message = 'Doctor account is pending approval'


class NotFoundError(MediHubError):
    status_code = 404
    default_message = 'Not Found'


class InternalError(MediHubError):
    pass


def _handle_medihub_error(error: MediHubError):
    return jsonify(error.to_dict()), error.status_code


def _handle_http_exception(error: HTTPException):
    return jsonify({'error': error.name, 'details': error.description}), error.code


def register_error_handlers(app):
    app.register_error_handler(MediHubError, _handle_medihub_error)
    app.register_error_handler(HTTPException, _handle_http_exception)
