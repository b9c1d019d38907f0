# routes/request_utils.py
"""
Small helpers shared by the API blueprints for reading query strings and
shaping JSON responses.
"""
import math
from flask import jsonify, request

from config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from validation import parse_timestamp


class BadRequest(ValueError):
    """A malformed query parameter. Routes turn it into a 400 response."""


def error_response(message, status_code, **extra):
    body = {"status": "error", "message": message}
    body.update(extra)
    return jsonify(body), status_code


def get_pagination():
    """Reads 'limit' and 'offset' from the query string, clamped to sane values."""
    try:
        limit = int(request.args.get('limit', DEFAULT_PAGE_LIMIT))
        offset = int(request.args.get('offset', 0))
    except ValueError:
        raise BadRequest("limit and offset must be integers")
    if limit <= 0 or offset < 0:
        raise BadRequest("limit must be positive and offset must not be negative")
    return min(limit, MAX_PAGE_LIMIT), offset


def pagination_envelope(total, limit, offset):
    return {
        'total': total,
        'limit': limit,
        'offset': offset,
        'pages': math.ceil(total / limit),
    }


def get_date_arg(name, end_of_day=False):
    """
    Reads a date or date-time filter from the query string in database format.
    A bare date covers the whole day: 00:00:00 for start filters, 23:59:59 for end filters.
    """
    value = request.args.get(name)
    if not value:
        return None
    if len(value) == 10:
        value = f"{value}T23:59:59" if end_of_day else f"{value}T00:00:00"
    try:
        return parse_timestamp(value)
    except ValueError:
        raise BadRequest(f"{name} must be an ISO-8601 date")


def get_bool_arg(name):
    """Reads 'true'/'1' or 'false'/'0' from the query string; None when absent."""
    value = request.args.get(name)
    if value is None or value == '':
        return None
    if value.lower() in ('true', '1'):
        return True
    if value.lower() in ('false', '0'):
        return False
    raise BadRequest(f"{name} must be true or false")
