"""Input validation helpers shared by the service agents.

Every ``is_valid_*`` check returns a boolean and never raises. Surrounding
whitespace is ignored except for passwords, which are compared verbatim.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from models import AppointmentStatus, Role

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})$")
PHONE_PATTERN = re.compile(r"^[+]?[0-9]{10,15}$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,20}$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'.]{2,50}$")
BLOOD_TYPE_PATTERN = re.compile(r"^(A|B|AB|O)[+-]$")
TIME_SLOT_PATTERN = re.compile(
    r"^([01]?[0-9]|2[0-3]):[0-5][0-9]-([01]?[0-9]|2[0-3]):[0-5][0-9]$"
)
PHONE_NOISE = re.compile(r"[\s\-()]")

GENDERS = frozenset({"male", "female", "other", "prefer not to say"})
MAX_AGE = 150


def _clean(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def is_not_empty(value: Optional[str]) -> bool:
    return bool(_clean(value))


def is_valid_email(email: Optional[str]) -> bool:
    return bool(EMAIL_PATTERN.match(_clean(email)))


def is_valid_phone(phone: Optional[str]) -> bool:
    """Spaces, dashes and parentheses are ignored."""

    return bool(PHONE_PATTERN.match(PHONE_NOISE.sub("", _clean(phone))))


def is_valid_username(username: Optional[str]) -> bool:
    return bool(USERNAME_PATTERN.match(_clean(username)))


def is_valid_password(password: Optional[str]) -> bool:
    """At least eight characters with a lower-case letter, an upper-case letter and a digit."""

    if not isinstance(password, str) or not password.strip():
        return False
    return bool(PASSWORD_PATTERN.match(password))


def passwords_match(password: Optional[str], confirmation: Optional[str]) -> bool:
    return password is not None and confirmation is not None and password == confirmation


def is_valid_name(name: Optional[str]) -> bool:
    return bool(NAME_PATTERN.match(_clean(name)))


def is_valid_age(age: object) -> bool:
    return isinstance(age, int) and not isinstance(age, bool) and 0 <= age <= MAX_AGE


def is_valid_gender(gender: Optional[str]) -> bool:
    return _clean(gender).lower() in GENDERS


def is_valid_blood_type(blood_type: Optional[str]) -> bool:
    return bool(BLOOD_TYPE_PATTERN.match(_clean(blood_type).upper()))


def parse_date(value: object) -> Optional[date]:
    """Accept a :class:`date` or a ``YYYY-MM-DD`` string."""

    if isinstance(value, date):
        return value
    text = _clean(value) if isinstance(value, str) else ""
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def is_valid_date(value: object) -> bool:
    return parse_date(value) is not None


def is_future_date(value: object, today: date) -> bool:
    """True for ``today`` and any later day."""

    parsed = parse_date(value)
    return parsed is not None and parsed >= today


def is_valid_time_slot(time_slot: Optional[str]) -> bool:
    return bool(TIME_SLOT_PATTERN.match(_clean(time_slot)))


def _length_between(value: Optional[str], low: int, high: int) -> bool:
    text = _clean(value)
    return low <= len(text) <= high


def is_valid_appointment_reason(reason: Optional[str]) -> bool:
    return _length_between(reason, 10, 500)


def is_valid_diagnosis(diagnosis: Optional[str]) -> bool:
    return _length_between(diagnosis, 5, 1000)


def is_valid_prescription_text(text: Optional[str]) -> bool:
    return _length_between(text, 5, 500)


def is_valid_role(role: Optional[str]) -> bool:
    return _clean(role).upper() in {member.value for member in Role}


def is_valid_appointment_status(status: Optional[str]) -> bool:
    return _clean(status).upper() in {member.value for member in AppointmentStatus}


def sanitize(value: Optional[str]) -> str:
    return _clean(value)


__all__ = [
    "is_future_date",
    "is_not_empty",
    "is_valid_age",
    "is_valid_appointment_reason",
    "is_valid_appointment_status",
    "is_valid_blood_type",
    "is_valid_date",
    "is_valid_diagnosis",
    "is_valid_email",
    "is_valid_gender",
    "is_valid_name",
    "is_valid_password",
    "is_valid_phone",
    "is_valid_prescription_text",
    "is_valid_role",
    "is_valid_time_slot",
    "is_valid_username",
    "parse_date",
    "passwords_match",
    "sanitize",
]
