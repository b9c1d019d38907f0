# water_quality.py
"""
Threshold evaluation for water-quality readings.

Classifies each measured parameter of a reading against its site's
thresholds as 'normal', 'warning' or 'critical', derives the reading's
overall status, and builds the alert records for every parameter that is
out of range. Everything here is a pure function over plain dicts; the
database and routes layers own persistence.
"""
import logging
import math
import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, localcontext

from threshold_config import CRITICAL_MIN_FACTOR, CRITICAL_MAX_FACTOR

logger = logging.getLogger(__name__)

# --- Status Vocabulary (readings) ---
NORMAL = 'normal'
WARNING = 'warning'
CRITICAL = 'critical'
STATUS_ORDER = [NORMAL, WARNING, CRITICAL]

# --- Severity Vocabulary (alerts) ---
# Readings speak normal/warning/critical, alerts speak low/medium/high.
# The translation happens here and nowhere else.
SEVERITY_LEVELS = ['low', 'medium', 'high']
SEVERITY_BY_STATUS = {WARNING: 'medium', CRITICAL: 'high'}

# --- Alert Message Templates ---
# 'range' messages describe both bounds, 'min'/'max' messages describe the
# single bound the parameter is normally limited by.
ALERT_TEMPLATES = {
    'pH': {'label': 'pH level', 'unit': '', 'decimals': 1, 'kind': 'range'},
    'temperature': {'label': 'Temperature', 'unit': '°C', 'decimals': 1, 'kind': 'range'},
    'dissolved_oxygen': {'label': 'Dissolved oxygen', 'unit': ' mg/L', 'decimals': 1, 'kind': 'min'},
    'conductivity': {'label': 'Conductivity', 'unit': ' μS/cm', 'decimals': 0, 'kind': 'max'},
    'turbidity': {'label': 'Turbidity', 'unit': ' NTU', 'decimals': 1, 'kind': 'max'},
}
GENERIC_DECIMALS = 2


def is_measured(value):
    """True for real, finite numbers. Booleans are not measurements."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def classify_parameter(value, threshold):
    """
    Classifies a single value against a {'min': ..., 'max': ...} threshold.
    A bound set to None (or missing) is not checked.
    """
    min_value = threshold.get('min')
    max_value = threshold.get('max')

    if (min_value is not None and value < min_value * CRITICAL_MIN_FACTOR) or \
       (max_value is not None and value > max_value * CRITICAL_MAX_FACTOR):
        return CRITICAL
    if (min_value is not None and value < min_value) or \
       (max_value is not None and value > max_value):
        return WARNING
    return NORMAL


def worst_status(statuses):
    """Returns the most severe status of an iterable, 'normal' when it is empty."""
    worst = NORMAL
    for status in statuses:
        if STATUS_ORDER.index(status) > STATUS_ORDER.index(worst):
            worst = status
    return worst


def _parameter_values(reading):
    # Accept either a full reading record or a bare {parameter: value} mapping.
    if 'parameters' in reading:
        return reading['parameters']
    return reading


def classify_reading(reading, thresholds):
    """
    Classifies every parameter that has both a measured value in the reading
    and a threshold for the site.

    Returns:
        dict: {'overall': status, 'per_parameter': {parameter: status}}
    """
    values = _parameter_values(reading)
    per_parameter = {}
    for parameter, threshold in thresholds.items():
        value = values.get(parameter)
        if not is_measured(value):
            continue
        per_parameter[parameter] = classify_parameter(value, threshold)

    return {
        'overall': worst_status(per_parameter.values()),
        'per_parameter': per_parameter,
    }


def _round(value, decimals):
    exact = Decimal(repr(float(value)))
    with localcontext() as ctx:
        # Enough digits for the whole integer part, however large the reading.
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 2)
        rounded = exact.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{rounded:f}"


def _bound(value):
    # Plain notation: 0.00001 and 1234567, never 1e-05 or 1.23457e+06.
    return f"{Decimal(repr(float(value))).normalize():f}"



def _range_suffix(threshold, unit):
    min_value, max_value = threshold.get('min'), threshold.get('max')
    if min_value is not None and max_value is not None:
        return f" ({_bound(min_value)}-{_bound(max_value)}{unit})"
    if min_value is not None:
        return f" (min: {_bound(min_value)}{unit})"
    if max_value is not None:
        return f" (max: {_bound(max_value)}{unit})"
    return ""


def build_alert_message(parameter, value, threshold):
    """
    Builds the human-readable alert text for a parameter that breached its
    threshold. Parameters without a dedicated template get a generic
    'outside acceptable range' message.
    """
    template = ALERT_TEMPLATES.get(parameter)
    if template is None:
        label = parameter.replace('_', ' ').capitalize()
        template = {'label': label, 'unit': '', 'decimals': GENERIC_DECIMALS, 'kind': 'range'}

    label, unit = template['label'], template['unit']
    shown = f"{label} {_round(value, template['decimals'])}{unit}"
    min_value, max_value = threshold.get('min'), threshold.get('max')

    if template['kind'] == 'min' and min_value is not None and value < min_value:
        return f"{shown} is below minimum ({_bound(min_value)}{unit})"
    if template['kind'] == 'max' and max_value is not None and value > max_value:
        return f"{shown} exceeds maximum ({_bound(max_value)}{unit})"
    return f"{shown} is outside acceptable range{_range_suffix(threshold, unit)}"


def generate_alerts(reading, per_parameter, thresholds):
    """
    Creates one alert record for every parameter whose status is not 'normal'.

    Args:
        reading (dict): The reading, with its 'id' and measured parameter values.
        per_parameter (dict): {parameter: status} as returned by classify_reading.
        thresholds (dict): The site's {parameter: {'min', 'max'}} configuration.

    Returns:
        list[dict]: Unacknowledged alert records, ready to be stored alongside the reading.
    """
    values = _parameter_values(reading)
    created_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    alerts = []

    for parameter, status in per_parameter.items():
        if status == NORMAL:
            continue
        value = values[parameter]
        alerts.append({
            'id': str(uuid.uuid4()),
            'reading_id': reading.get('id'),
            'parameter': parameter,
            'severity': SEVERITY_BY_STATUS[status],
            'message': build_alert_message(parameter, value, thresholds[parameter]),
            'created_at': created_at,
            'acknowledged': False,
            'acknowledged_by': None,
            'acknowledged_at': None,
        })

    if alerts:
        logger.debug("Generated %d alert(s) for reading %s", len(alerts), reading.get('id'))
    return alerts
