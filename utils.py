import math
from flask import request
from errors import ValidationError

# Largest value the INTEGER columns accept on every backend
MAX_INTEGER = 2**31 - 1


def get_json_body():
    """Returns the request body as a dict, or raises ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def missing_fields(data, fields):
    """Names of ``fields`` that are absent or blank in ``data``."""
    missing = []
    for field in fields:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            missing.append(field)
    return missing


def positive_number(data, field, integer=False):
    """
    Reads an optional positive number from the payload.

    Missing, null and empty-string values come back as None. Booleans are
    rejected even though they are ints in Python.
    """
    value = data.get(field)
    if value is None or value == '':
        return None

    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a positive number')
    try:
        number = int(value) if integer else float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'{field} must be a positive number')

    if integer and float(value) != number:
        raise ValidationError(f'{field} must be a whole number')
    if not math.isfinite(number) or number <= 0:
        raise ValidationError(f'{field} must be a positive number')
    if integer and number > MAX_INTEGER:
        raise ValidationError(f'{field} is too large')
    return number
