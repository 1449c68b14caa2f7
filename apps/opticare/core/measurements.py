"""
Eye-test measurement reshaping

Eye tests carry six measurement blocks (distance, near and intermediate vision
for each eye). Forms submit them as loosely typed values; the backend expects
numbers, so the payload builders clean every block before sending.
"""
import copy
from datetime import date, datetime

EYE_FIELDS = ['dvRightEye', 'dvLeftEye', 'nvRightEye', 'nvLeftEye', 'imRightEye', 'imLeftEye']

EYE_FIELD_LABELS = {
    'dvRightEye': 'Distance Vision - Right Eye',
    'dvLeftEye': 'Distance Vision - Left Eye',
    'nvRightEye': 'Near Vision - Right Eye',
    'nvLeftEye': 'Near Vision - Left Eye',
    'imRightEye': 'Intermediate - Right Eye',
    'imLeftEye': 'Intermediate - Left Eye',
}

NUMERIC_PARTS = {'cyl': float, 'axis': int, 'add': float}


def default_measurement():
    return {'sph': 0, 'cyl': '', 'axis': '', 'add': '', 'vision': ''}


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _parse(value, cast):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return cast(value)
    try:
        return cast(float(value)) if cast is int else cast(value)
    except (TypeError, ValueError):
        return None


def clean_measurement(measurement, blank_as_zero=False):
    """Coerce one measurement block for the backend

    sph falls back to 0. Blank cyl/axis/add become 0 when blank_as_zero is set
    and are dropped otherwise; values that do not parse are dropped.
    """
    measurement = dict(measurement or {})
    cleaned = {key: value for key, value in measurement.items() if key not in NUMERIC_PARTS}

    sph = _parse(measurement.get('sph'), float) if not _is_blank(measurement.get('sph')) else None
    cleaned['sph'] = sph if sph is not None else 0

    for part, cast in NUMERIC_PARTS.items():
        value = measurement.get(part)
        if _is_blank(value):
            if blank_as_zero:
                cleaned[part] = 0
            continue
        parsed = _parse(value, cast)
        if parsed is not None:
            cleaned[part] = parsed

    if _is_blank(cleaned.get('vision')):
        cleaned.pop('vision', None)
    return cleaned


def safe_measurement(measurement):
    """Measurement merged over the defaults, for prefilling a form"""
    merged = default_measurement()
    for key, value in (measurement or {}).items():
        merged[key] = '' if value is None else value
    if _is_blank(merged.get('sph')):
        merged['sph'] = 0
    return merged


def sanitize_nulls(data):
    """Replace None with '' everywhere so form inputs render empty"""
    if isinstance(data, dict):
        return {key: sanitize_nulls(value) for key, value in data.items()}
    if isinstance(data, list):
        return [sanitize_nulls(value) for value in data]
    return '' if data is None else data


def format_date(value):
    """Date-ish value as YYYY-MM-DD"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value:
        return value[:10]
    return value


def build_eye_test_payload(data, date_fields=('bookingDate', 'deliveryDate'), blank_as_zero=False,
                           personal=True):
    """Payload for creating or updating an eye test from wizard data"""
    payload = {key: value for key, value in data.items() if key != 'otp'}

    for field in EYE_FIELDS:
        payload[field] = clean_measurement(data.get(field), blank_as_zero=blank_as_zero)

    for field in date_fields:
        if field in payload:
            payload[field] = format_date(payload[field])

    if personal:
        age = payload.get('age')
        if _is_blank(age):
            payload.pop('age', None)
        else:
            parsed = _parse(age, int)
            if parsed is None:
                payload.pop('age', None)
            else:
                payload['age'] = parsed
        if _is_blank(payload.get('email')):
            payload.pop('email', None)

    for field in ('frame', 'lens', 'notes'):
        if payload.get(field) is None and field in payload:
            payload[field] = ''
    return payload


def prefill_from_test(test, include_personal=True):
    """Form values for editing an existing eye test"""
    values = {}
    if include_personal:
        for field in ('email', 'name', 'phone', 'address', 'age'):
            values[field] = '' if test.get(field) is None else test.get(field)
    for field in ('frame', 'lens', 'notes'):
        values[field] = test.get(field) or ''
    for field in ('testDate', 'bookingDate', 'deliveryDate'):
        if test.get(field):
            values[field] = format_date(test[field])
    for field in EYE_FIELDS:
        values[field] = safe_measurement(test.get(field))
    return values


def blank_eye_test(today=None, personal=True):
    """Initial form values for a new eye test"""
    today = (today or date.today()).isoformat()
    values = {field: default_measurement() for field in EYE_FIELDS}
    values.update({'frame': '', 'lens': '', 'notes': '',
                   'testDate': today, 'bookingDate': today, 'deliveryDate': today})
    if personal:
        values.update({'email': '', 'name': '', 'phone': '', 'address': '', 'age': ''})
    return values


def merge_form_values(base, *layers):
    """Overlay form values; measurement blocks are merged part by part"""
    merged = copy.deepcopy(base)
    for layer in layers:
        for key, value in (layer or {}).items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value
    return sanitize_nulls(merged)


def sort_by_date(records, key='testDate'):
    """Newest first; records without the date go last"""
    return sorted(records or [], key=lambda record: record.get(key) or '', reverse=True)


def eye_test_id(test):
    return test.get('testId', test.get('id'))
