"""
Donor field rules.

``check_donor`` is the single rule set for donor records. The API runs it
for the pre-submission check (``POST /api/donors/validate``) and again in
``donors.create_donor`` before anything is written.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import TypeAdapter, ValidationError

from schemas import BLOOD_GROUPS

GMAIL_SUFFIX = "@gmail.com"
PHONE_PATTERN = re.compile(r"[0-9]{11}")
FACEBOOK_PROFILE_PATTERN = re.compile(r"https?://(www\.)?(facebook|fb)\.com/[\w.-]+[^/]", re.ASCII)

_datetime_adapter = TypeAdapter(datetime)
_date_adapter = TypeAdapter(date)
# strings must at least open like an ISO date; bare numbers are not timestamps
ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def _pick(candidate: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if candidate.get(key) is not None:
            return candidate[key]
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def is_gmail_address(value: str) -> bool:
    if not value.endswith(GMAIL_SUFFIX):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_phone_number(value: str) -> bool:
    return PHONE_PATTERN.fullmatch(value) is not None


def is_facebook_profile_url(value: str) -> bool:
    return FACEBOOK_PROFILE_PATTERN.fullmatch(value) is not None


def parse_donation_date(value: Any) -> Optional[datetime]:
    """Parse a datetime or date (ISO string or object) into an aware UTC datetime.

    Returns None when the value cannot be read as a date. Naive values are
    taken to be UTC; a bare date means midnight of that day.
    """
    if isinstance(value, str):
        value = value.strip()
        if not ISO_DATE_PREFIX.match(value):
            return None
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError:
        try:
            day = _date_adapter.validate_python(value)
        except ValidationError:
            return None
        parsed = datetime.combine(day, time.min)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def check_donor(candidate: Mapping[str, Any], now: datetime = None) -> Tuple[Dict[str, Any], List[str]]:
    """Evaluate every donor rule against ``candidate``.

    ``candidate`` may use camelCase (wire) or snake_case keys. Returns the
    normalized record, keyed the way it is stored, and the list of messages
    for the rules that failed. An empty list means the record is valid.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    record: Dict[str, Any] = {}
    errors: List[str] = []

    name = _text(_pick(candidate, "name"))
    if name is None:
        errors.append("Name is required")
    record["name"] = name

    location = _text(_pick(candidate, "location"))
    if location is None:
        errors.append("Location is required")
    record["location"] = location

    email = _text(_pick(candidate, "email"))
    if email is None:
        errors.append("Email is required")
    else:
        email = email.lower()
        if not is_gmail_address(email):
            errors.append("Please enter a valid Gmail address")
    record["email"] = email

    blood_group = _text(_pick(candidate, "bloodGroup", "blood_group"))
    if blood_group is None:
        errors.append("Blood group is required")
    elif blood_group not in BLOOD_GROUPS:
        errors.append(f"{blood_group} is not a valid blood group")
    record["bloodGroup"] = blood_group

    phone_number = _text(_pick(candidate, "phoneNumber", "phone_number"))
    if phone_number is not None:
        if not is_phone_number(phone_number):
            errors.append(f"{phone_number} is not a valid phone number! Must be exactly 11 digits.")
        record["phoneNumber"] = phone_number

    facebook_url = _text(_pick(candidate, "facebookProfileUrl", "facebook_profile_url"))
    if facebook_url is not None:
        if not is_facebook_profile_url(facebook_url):
            errors.append("Please enter a valid Facebook profile URL")
        record["facebookProfileUrl"] = facebook_url

    raw_date = _pick(candidate, "lastDonatedDate", "last_donated_date")
    if isinstance(raw_date, str):
        raw_date = _text(raw_date)
    if raw_date is not None:
        donated = parse_donation_date(raw_date)
        if donated is None:
            errors.append("Last donated date must be a valid date")
        elif donated > now:
            errors.append("Last donated date cannot be in the future")
        record["lastDonatedDate"] = donated

    if phone_number is None and facebook_url is None:
        errors.append("Either Phone Number or Facebook Profile URL is required")

    return record, errors
