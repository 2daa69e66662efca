# backend/services/validation.py
"""
Request payload validation for the API.

Each entity has a field table mapping the camelCase key used on the wire to
the model attribute, a parser and a presence rule.
``validate_payload`` returns a dict of model attributes ready to be set on a
model instance, or raises ``ValidationError`` with a message for the client.
"""
import re
import logging

from models.user import ROLES
from models.service import SERVICE_STATUSES, ITEM_TYPES
from models.quote import QUOTE_STATUSES
from models.work_order import WORK_ORDER_STATUSES
from services.date_utils import parse_date

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class ValidationError(ValueError):
    """Raised when a payload does not match the rules for its entity"""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


def _string(key, value):
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", key)
    return value.strip() or None


def _password(key, value):
    # kept verbatim, login compares the raw string
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", key)
    return value


def _email(key, value):
    value = _string(key, value)
    if value and not re.match(EMAIL_PATTERN, value):
        raise ValidationError('Please enter a valid email address', key)
    return value


def _integer(minimum=None):
    def parse(key, value):
        # bool is an int subclass, reject it explicitly
        if isinstance(value, bool):
            raise ValidationError(f"{key} must be an integer", key)
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ValidationError(f"{key} must be an integer", key)
        elif isinstance(value, float):
            if not value.is_integer():
                raise ValidationError(f"{key} must be an integer", key)
            value = int(value)
        elif not isinstance(value, int):
            raise ValidationError(f"{key} must be an integer", key)

        if minimum is not None and value < minimum:
            raise ValidationError(f"{key} must be greater than or equal to {minimum}", key)
        return value
    return parse


def _choice(options):
    def parse(key, value):
        if value not in options:
            raise ValidationError(f"{key} must be one of: {', '.join(options)}", key)
        return value
    return parse


def _date(key, value):
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationError(f"{key}: {e}", key)


def _boolean(key, value):
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false", key)
    return value


def _id_list(key, value):
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{key} must be a list of user ids", key)
    parse_id = _integer(minimum=1)
    ids = []
    for raw in value:
        user_id = parse_id(key, raw)
        if user_id not in ids:
            ids.append(user_id)
    return ids


# Field presence rules
REQUIRED = 'required'    # must be present and non-empty on create, never null
DEFAULTED = 'defaulted'  # may be omitted on create (model default applies), never null
OPTIONAL = 'optional'    # may be omitted or null

# wire key -> (model attribute, parser, presence rule)
USER_FIELDS = {
    'username': ('username', _string, REQUIRED),
    'password': ('password', _password, REQUIRED),
    'name': ('name', _string, REQUIRED),
    'email': ('email', _email, REQUIRED),
    'role': ('role', _choice(ROLES), DEFAULTED),
    'isActive': ('is_active', _boolean, DEFAULTED),
}

CLIENT_FIELDS = {
    'name': ('name', _string, REQUIRED),
    'contactName': ('contact_name', _string, OPTIONAL),
    'email': ('email', _email, OPTIONAL),
    'phone': ('phone', _string, OPTIONAL),
    'address': ('address', _string, OPTIONAL),
    'city': ('city', _string, OPTIONAL),
    'state': ('state', _string, OPTIONAL),
    'zip': ('zip', _string, OPTIONAL),
}

SERVICE_FIELDS = {
    'clientId': ('client_id', _integer(minimum=1), REQUIRED),
    'serviceType': ('service_type', _string, REQUIRED),
    'description': ('description', _string, OPTIONAL),
    'status': ('status', _choice(SERVICE_STATUSES), DEFAULTED),
    'scheduledDate': ('scheduled_date', _date, OPTIONAL),
    'completedDate': ('completed_date', _date, OPTIONAL),
}

ITEM_FIELDS = {
    'type': ('type', _choice(ITEM_TYPES), REQUIRED),
    'description': ('description', _string, REQUIRED),
    'quantity': ('quantity', _integer(minimum=1), REQUIRED),
    'unitPrice': ('unit_price', _integer(minimum=0), REQUIRED),
}

QUOTE_FIELDS = {
    'clientId': ('client_id', _integer(minimum=1), REQUIRED),
    'serviceId': ('service_id', _integer(minimum=1), OPTIONAL),
    'description': ('description', _string, OPTIONAL),
    'status': ('status', _choice(QUOTE_STATUSES), DEFAULTED),
    'total': ('total', _integer(minimum=0), DEFAULTED),
    'validUntil': ('valid_until', _date, OPTIONAL),
}

WORK_ORDER_FIELDS = {
    'clientId': ('client_id', _integer(minimum=1), REQUIRED),
    'serviceId': ('service_id', _integer(minimum=1), REQUIRED),
    'description': ('description', _string, OPTIONAL),
    'status': ('status', _choice(WORK_ORDER_STATUSES), DEFAULTED),
    'scheduledDate': ('scheduled_date', _date, OPTIONAL),
    'completedDate': ('completed_date', _date, OPTIONAL),
    'technicianIds': ('technician_ids', _id_list, DEFAULTED),
}


def validate_payload(data, fields, partial=False):
    """
    Validate a request body against a field table.

    Args:
        data: the decoded JSON body
        fields: one of the *_FIELDS tables above
        partial: update semantics, only keys present in ``data`` are checked

    Returns:
        dict of model attribute -> parsed value

    Raises:
        ValidationError: on the first field that fails
    """
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    cleaned = {}
    for key, (attribute, parser, presence) in fields.items():
        if key not in data:
            if presence == REQUIRED and not partial:
                raise ValidationError(f"{key} is required", key)
            continue

        value = data[key]
        if value is None or (isinstance(value, str) and not value.strip()):
            if presence == REQUIRED:
                raise ValidationError(f"{key} is required", key)
            if presence == DEFAULTED:
                raise ValidationError(f"{key} cannot be empty", key)
            cleaned[attribute] = None
            continue

        cleaned[attribute] = parser(key, value)

    return cleaned
