from datetime import datetime

from flask import request

from medihub.errors import ValidationError


def get_payload() -> dict:
    """Request body as a dict, whether it was sent as JSON or as a form."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def parse_date(value, field: str, required=True):
    if not value:
        if required:
            raise ValidationError(details=f'{field} is required')
        return None
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(details=f'{field} must be a date in YYYY-MM-DD format') from None


def parse_id(value, label: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {label}') from None
    if parsed <= 0:
        raise ValidationError(f'Invalid {label}')
    return parsed
