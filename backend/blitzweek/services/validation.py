"""Field validation for registration requests."""
import re
from typing import Any, Dict, List, Optional

from blitzweek.core.config import settings
from blitzweek.core.exceptions import ValidationError
from blitzweek.models.registration import BRANCHES, EVENTS, YEARS
from blitzweek.services.identity import normalize_email, normalize_roll_number

ROLL_NUMBER_PATTERN = re.compile(r"^\d{2}[A-Z]\d{4,5}$")
PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")


def ldap_pattern(domain: Optional[str] = None):
    domain = domain or settings.INSTITUTE_EMAIL_DOMAIN
    return re.compile(r"^[a-zA-Z0-9._%+-]+@" + re.escape(domain) + r"$")


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def validate_registration(candidate: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check every field of a registration request.

    Args:
        candidate: Request body keyed by API names (``ldapId``, ``rollNumber``,
            ``interestedEvents``...)

    Returns:
        Cleaned values keyed by column name, identity fields normalized and
        duplicate event selections collapsed.

    Raises:
        ValidationError: listing every violated field, not just the first
    """
    errors: List[Dict[str, str]] = []

    def fail(field: str, message: str):
        errors.append({"field": field, "message": message})

    name = _text(candidate.get("name"))
    if not name:
        fail("name", "Name is required")

    ldap_id = normalize_email(_text(candidate.get("ldapId")))
    if not ldap_id:
        fail("ldapId", "LDAP ID is required")
    elif not ldap_pattern().match(ldap_id):
        fail("ldapId", "Please enter a valid IITB email address")

    roll_number = normalize_roll_number(_text(candidate.get("rollNumber")))
    if not roll_number:
        fail("rollNumber", "Roll Number is required")
    elif not ROLL_NUMBER_PATTERN.match(roll_number):
        fail("rollNumber", "Invalid Roll Number format")

    branch = _text(candidate.get("branch"))
    if not branch:
        fail("branch", "Branch is required")
    elif branch not in BRANCHES:
        fail("branch", "Invalid branch")

    year = _text(candidate.get("year"))
    if not year:
        fail("year", "Year is required")
    elif year not in YEARS:
        fail("year", "Invalid year")

    raw_events = candidate.get("interestedEvents")
    if isinstance(raw_events, str):
        raw_events = [raw_events]
    events: List[str] = []
    if not raw_events:
        fail("interestedEvents", "Please select at least one event")
    elif not isinstance(raw_events, list) or not all(
        isinstance(event, str) and event in EVENTS for event in raw_events
    ):
        fail("interestedEvents", "Invalid event selection")
    else:
        for event in raw_events:
            if event not in events:
                events.append(event)

    phone_number = _text(candidate.get("phoneNumber")) or None
    if phone_number and not PHONE_PATTERN.match(phone_number):
        fail("phoneNumber", "Please enter a valid 10-digit mobile number")

    if errors:
        raise ValidationError(errors)

    return {
        "name": name,
        "ldap_id": ldap_id,
        "roll_number": roll_number,
        "branch": branch,
        "year": year,
        "interested_events": events,
        "phone_number": phone_number,
    }
