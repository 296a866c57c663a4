from django.utils.dateparse import parse_date

from core.exceptions import InvalidInput


def int_param(params, name):
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer.")
    if value < 1:
        raise InvalidInput(f"{name} must be >= 1.")
    return value


def date_param(params, name):
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise InvalidInput(f"{name} must be a date in YYYY-MM-DD format.")
    return value
