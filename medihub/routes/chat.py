from flask import Blueprint, jsonify

from medihub import db
from medihub.appointments import get_owned_appointment
from medihub.auth import current_principal, require_auth
from medihub.errors import UnauthorizedError, ValidationError
from medihub.identity import Role, clean_text
from medihub.models import ChatMessage
from medihub.persistence import commit
from medihub.routes.common import get_payload, parse_id

chat = Blueprint('chat', __name__, url_prefix='/chat')

CHAT_ROLES = (Role.PATIENT, Role.DOCTOR)


def _chat_participant(sender_type=None):
    """Resolve the patient or doctor behind this session."""
    if sender_type:
        role = Role.parse(sender_type)
        if role not in CHAT_ROLES:
            raise ValidationError(details='senderType must be patient or doctor')
        return role, require_auth(role)

    role, principal = current_principal()
    if role not in CHAT_ROLES:
        raise UnauthorizedError(details='Please log in as a patient or doctor')
    return role, principal


def _serialize(entry: ChatMessage) -> dict:
    return {
        'id': entry.id,
        'appointmentId': entry.appointment_id,
        'senderId': entry.sender_id,
        'senderType': entry.sender_type,
        'message': entry.message,
        'timestamp': entry.timestamp.isoformat(),
    }


@chat.route('/send', methods=['POST'])
def send():
    payload = get_payload()
    role, sender = _chat_participant(payload.get('senderType'))
    appointment = get_owned_appointment(role, sender, parse_id(payload.get('appointmentId'), 'appointment ID'))

    if appointment.status != 'confirmed':
        raise ValidationError('Chat is only available for confirmed appointments')
    message = clean_text(payload.get('message'), 'message')
    if not message:
        raise ValidationError(details='message is required')

    entry = ChatMessage(
        appointment_id=appointment.id,
        sender_id=sender.id,
        sender_type=role.value,
        message=message,
    )
    db.session.add(entry)
    commit('send chat message')
    return jsonify({'success': True, 'chat': _serialize(entry)})


@chat.route('/<int:appointment_id>')
def history(appointment_id):
    role, reader = _chat_participant()
    appointment = get_owned_appointment(role, reader, appointment_id)
    messages = (
        ChatMessage.query.filter_by(appointment_id=appointment.id)
        .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
        .all()
    )
    return jsonify({'messages': [_serialize(entry) for entry in messages]})
