# validation.py
"""
Validation of incoming JSON payloads before they reach the evaluator or the
database. Rejects malformed data instead of guessing a value for it.
"""
from datetime import datetime

from threshold_config import KNOWN_PARAMETERS
from water_quality import is_measured


class ReadingValidationError(ValueError):
    """Raised when a submitted payload cannot be accepted. Carries per-field errors."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {problem}" for field, problem in errors.items()))


def parse_timestamp(value):
    """
    Parses an ISO-8601 timestamp and returns it in the database format.
    Accepts a trailing 'Z' as sent by browsers.
    """
    if isinstance(value, str) and value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def validate_reading_payload(data):
    """
    Validates a data-entry submission.

    Parameter values may be omitted or null (not measured), but a value that
    is present must be a finite number.

    Returns:
        dict: Normalized reading fields: site_id, timestamp, latitude,
              longitude, notes, pathogens and a 'parameters' mapping.
    Raises:
        ReadingValidationError: If any field is missing or malformed.
    """
    if not isinstance(data, dict):
        raise ReadingValidationError({'body': 'a JSON object is required'})

    errors = {}

    site_id = data.get('site_id')
    if not site_id or not isinstance(site_id, str):
        errors['site_id'] = 'is required'

    timestamp = data.get('timestamp')
    if timestamp is None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    else:
        try:
            timestamp = parse_timestamp(timestamp)
        except (TypeError, ValueError):
            errors['timestamp'] = 'must be an ISO-8601 date and time'

    location = {}
    for field, limit in (('latitude', 90), ('longitude', 180)):
        value = data.get(field)
        if value is None:
            location[field] = None
        elif not is_measured(value) or abs(value) > limit:
            errors[field] = f'must be a number between -{limit} and {limit}'
        else:
            location[field] = float(value)

    parameters = {}
    for parameter in KNOWN_PARAMETERS:
        value = data.get(parameter)
        if value is None:
            continue
        if not is_measured(value):
            errors[parameter] = 'must be a number'
            continue
        parameters[parameter] = float(value)

    if not parameters and not errors:
        errors['parameters'] = 'at least one measured parameter is required'

    notes = data.get('notes') or ''
    pathogens = data.get('pathogens') or ''
    if not isinstance(notes, str):
        errors['notes'] = 'must be text'
    if not isinstance(pathogens, str):
        errors['pathogens'] = 'must be text'

    if errors:
        raise ReadingValidationError(errors)

    return {
        'site_id': site_id,
        'timestamp': timestamp,
        'latitude': location['latitude'],
        'longitude': location['longitude'],
        'notes': notes,
        'pathogens': pathogens,
        'parameters': parameters,
    }


def validate_threshold_payload(data):
    """
    Validates a threshold edit: {'min': number|null, 'max': number|null}.
    Empty strings from HTML forms are treated as null.
    """
    if not isinstance(data, dict):
        raise ReadingValidationError({'body': 'a JSON object is required'})

    errors = {}
    bounds = {}
    for field in ('min', 'max'):
        value = data.get(field)
        if value == '':
            value = None
        if value is not None and not is_measured(value):
            errors[field] = 'must be a number or null'
        bounds[field] = float(value) if value is not None and field not in errors else None

    if not errors and bounds['min'] is not None and bounds['max'] is not None \
            and bounds['min'] > bounds['max']:
        errors['min'] = 'must not be greater than max'

    if errors:
        raise ReadingValidationError(errors)
    return bounds
