# app/validation.py
import re
from datetime import date, datetime

from email_validator import EmailNotValidError, validate_email

from asset_registry.app.errors import ValidationError

PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 ().\-]{2,14}$')
PHONE_MAX_LENGTH = 15


def get_payload(request):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def check_id_matches(payload, ident, label):
    if payload.get('id') is None:
        return
    body_id = payload['id']
    if isinstance(body_id, str) and body_id.strip().isdigit():
        body_id = int(body_id)
    if isinstance(body_id, bool) or not isinstance(body_id, int):
        raise ValidationError(f"'id' must be an integer, got {payload['id']!r}.")
    if body_id != ident:
        raise ValidationError(f"{label} ID mismatch.")


def require_text(payload, field, max_length, min_length=1):
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field}' is required.")
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"'{field}' must be at least {min_length} characters.")
    if len(value) > max_length:
        raise ValidationError(f"'{field}' must be at most {max_length} characters.")
    return value


def optional_text(payload, field, max_length):
    value = payload.get(field)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string.")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"'{field}' must be at most {max_length} characters.")
    return value


def parse_enum(enum_cls, value, field, default=None):
    if value is None or value == '':
        if default is None:
            raise ValidationError(f"'{field}' is required.")
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        # Match the input to an enum value, ignoring case
        return next(m for m in enum_cls if m.value.lower() == str(value).strip().lower())
    except StopIteration:
        allowed = ', '.join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field}: {value}. Must be one of {allowed}.")


def parse_bool(payload, field, default=False):
    value = payload.get(field, default)
    if not isinstance(value, bool):
        raise ValidationError(f"'{field}' must be true or false.")
    return value


def parse_int(payload, field):
    value = payload.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"'{field}' must be an integer id.")
    return value


def parse_date(value, field, required=True):
    if value is None or value == '':
        if required:
            raise ValidationError(f"'{field}' is required.")
        return None
    try:
        # Accept full timestamps from clients that only send datetimes
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        raise ValidationError(f"'{field}' must be an ISO date (YYYY-MM-DD).")


def parse_datetime(value, field, required=True):
    if value is None or value == '':
        if required:
            raise ValidationError(f"'{field}' is required.")
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"'{field}' must be an ISO date or datetime.")
    if parsed.tzinfo is not None:
        # Stored timestamps are naive local time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def normalize_email(value):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("'email' is required.")
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}")
    return result.normalized


def normalize_phone(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return ''
    if not isinstance(value, str) or not PHONE_PATTERN.match(value.strip()):
        raise ValidationError(f"Invalid phone number: {value}")
    value = value.strip()
    if len(value) > PHONE_MAX_LENGTH:
        raise ValidationError(f"'phone_number' must be at most {PHONE_MAX_LENGTH} characters.")
    return value


def isoformat(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
