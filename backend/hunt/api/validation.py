"""Small request-body checks shared by the blueprints.

Each helper raises :class:`~hunt.errors.ValidationError` with a
field-level ``details`` entry so clients can point at the bad input.
"""
import re

from flask import request

from hunt.errors import ValidationError

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _invalid(field, message):
    return ValidationError('Validation failed', details=[{'field': field, 'message': message}])


def get_payload():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _invalid('body', 'Expected a JSON object')
    return data


def require_string(data, field, min_length=1):
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise _invalid(field, 'Required')
    value = value.strip()
    if len(value) < min_length:
        raise _invalid(field, f'Must be at least {min_length} characters')
    return value


def optional_string(data, field, min_length=1):
    if data.get(field) is None:
        return None
    return require_string(data, field, min_length=min_length)


def require_int(data, field, positive=True):
    """Read an integer field, accepting numeric strings."""
    value = data.get(field)
    if isinstance(value, bool) or value is None:
        raise _invalid(field, 'Required integer')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise _invalid(field, 'Must be an integer')
    if isinstance(value, float) and value != number:
        raise _invalid(field, 'Must be an integer')
    if positive and number <= 0:
        raise _invalid(field, 'Must be a positive integer')
    return number


def optional_int(data, field, default=None, positive=True):
    if data.get(field) is None:
        return default
    return require_int(data, field, positive=positive)


def require_email(data, field='email'):
    value = require_string(data, field)
    if not EMAIL_RE.match(value):
        raise _invalid(field, 'Invalid email address')
    return value.lower()


def require_choice(data, field, choices):
    value = data.get(field)
    if value not in choices:
        raise _invalid(field, f"Must be one of: {', '.join(choices)}")
    return value


def require_id_list(data, field):
    value = data.get(field)
    if not isinstance(value, list) or not value:
        raise _invalid(field, 'Must be a non-empty list')
    ids = []
    for item in value:
        try:
            ids.append(int(item))
        except (TypeError, ValueError):
            raise _invalid(field, f'Invalid id: {item!r}')
    return ids


def query_int(name):
    """Read a positive integer from the query string."""
    raw = request.args.get(name)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise _invalid(name, 'Must be an integer')
    if value <= 0:
        raise _invalid(name, 'Must be a positive integer')
    return value
