"""
Input validation for submitted records.

Each ``parse_*`` function takes a JSON payload, collects every problem it
finds and raises a single ValidationError listing them. On success it
returns a dict of cleaned column values ready to be set on a model. With
``partial=True`` only the fields present in the payload are checked and
returned, which is what edit requests send. A full parse fills optional
fields that are left out with their defaults, so a replacement never keeps
a stale value.
"""

import math
import re
from typing import Any, Callable, Dict, List, Tuple

from earn_tracker.errors import InvalidPeriod, ValidationError
from earn_tracker.models.event import EventKind
from earn_tracker.models.tax_rule import TaxRuleKind
from earn_tracker.utils.period import parse_iso_date, validate_period

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 80
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')
TRUE_STRINGS = {'true', '1', 'yes', 'on'}
FALSE_STRINGS = {'false', '0', 'no', 'off', ''}


def parse_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f'{field} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f'{field} must be a number')
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f'{field} must be a finite number')
    return number


def parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ValueError(f'{field} must be true or false')


def parse_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f'{field} must be an integer')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f'{field} must be an integer')
    if isinstance(value, float) and value != number:
        raise ValueError(f'{field} must be an integer')
    return number


def _positive(field: str) -> Callable[[Any], float]:
    def check(value):
        number = parse_number(value, field)
        if number <= 0:
            raise ValueError(f'{field} must be greater than 0')
        return number
    return check


def _non_negative(field: str) -> Callable[[Any], float]:
    def check(value):
        number = parse_number(value, field)
        if number < 0:
            raise ValueError(f'{field} must not be negative')
        return number
    return check


def _text(field: str, required: bool = True, max_length: int = None) -> Callable[[Any], Any]:
    def check(value):
        if value is None and not required:
            return None
        if not isinstance(value, str):
            raise ValueError(f'{field} must be a string')
        value = value.strip()
        if required and not value:
            raise ValueError(f'{field} is required')
        if max_length and len(value) > max_length:
            raise ValueError(f'{field} must be at most {max_length} characters')
        return value or None
    return check


def _currency(value):
    if not isinstance(value, str) or not CURRENCY_PATTERN.match(value.strip().upper()):
        raise ValueError('currency must be a three-letter currency code')
    return value.strip().upper()


def _date(field: str) -> Callable[[Any], Any]:
    def check(value):
        try:
            return parse_iso_date(value)
        except InvalidPeriod:
            raise ValueError(f'{field} must be a date in YYYY-MM-DD format')
    return check


def _choice(field: str, enum_cls) -> Callable[[Any], str]:
    allowed = [member.value for member in enum_cls]

    def check(value):
        if value not in allowed:
            raise ValueError(f'{field} must be one of: {", ".join(allowed)}')
        return value
    return check


def _parse(data: Any, schema: Dict[str, Tuple[Callable, bool]], partial: bool,
           defaults: Dict[str, Any] = None) -> dict:
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    errors: List[str] = []
    cleaned = {}
    for field, (check, required) in schema.items():
        if field not in data:
            if required and not partial:
                errors.append(f'{field} is required')
            elif not partial and defaults and field in defaults:
                cleaned[field] = defaults[field]
            continue
        try:
            cleaned[field] = check(data[field])
        except ValueError as e:
            errors.append(str(e))

    if errors:
        raise ValidationError('Invalid input', details={'errors': errors})
    return cleaned


INCOME_SCHEMA = {
    'amount': (_positive('amount'), True),
    'currency': (_currency, True),
    'exchange_rate': (_positive('exchange_rate'), True),
    'description': (_text('description', required=False), False),
    'date': (_date('date'), True),
}

TAX_RULE_SCHEMA = {
    'name': (_text('name', max_length=120), True),
    'kind': (_choice('kind', TaxRuleKind), True),
    'value': (_non_negative('value'), True),
    'active': (lambda v: parse_bool(v, 'active'), False),
    'year': (lambda v: parse_int(v, 'year'), True),
    'quarter': (lambda v: parse_int(v, 'quarter'), True),
}

EVENT_SCHEMA = {
    'kind': (_choice('kind', EventKind), True),
    'description': (_text('description'), True),
    'date': (_date('date'), True),
    'completed': (lambda v: parse_bool(v, 'completed'), False),
}

INCOME_DEFAULTS = {'description': None}
TAX_RULE_DEFAULTS = {'active': True}
EVENT_DEFAULTS = {'completed': False}


def parse_income(data: Any, partial: bool = False) -> dict:
    return _parse(data, INCOME_SCHEMA, partial, INCOME_DEFAULTS)


def parse_tax_rule(data: Any, partial: bool = False) -> dict:
    cleaned = _parse(data, TAX_RULE_SCHEMA, partial, TAX_RULE_DEFAULTS)
    if 'quarter' in cleaned and cleaned['quarter'] not in (1, 2, 3, 4):
        raise InvalidPeriod(f'Quarter must be between 1 and 4, got {cleaned["quarter"]}')
    if 'year' in cleaned:
        validate_period(cleaned['year'], cleaned.get('quarter', 1))
    return cleaned


def parse_event(data: Any, partial: bool = False) -> dict:
    return _parse(data, EVENT_SCHEMA, partial, EVENT_DEFAULTS)


def parse_credentials(data: Any) -> Tuple[str, str]:
    """
    Validate a username/password pair.

    Returns:
        Tuple of (username, password)
    """
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    username = data.get('username')
    password = data.get('password')
    errors = []

    if not isinstance(username, str) or not username.strip():
        errors.append('Username is required')
    else:
        username = username.strip()
        if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
            errors.append(
                f'Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters'
            )

    if not isinstance(password, str) or not password:
        errors.append('Password is required')
    elif not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        errors.append(
            f'Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters'
        )

    if errors:
        raise ValidationError('Invalid credentials format', details={'errors': errors})
    return username, password
