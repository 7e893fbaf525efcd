"""Registration workflow and the administrative operations over it."""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blitzweek.core.config import settings
from blitzweek.core.exceptions import (
    DuplicateRegistration,
    InternalFailure,
    InvalidStatus,
    NotFound,
    ValidationError,
)
from blitzweek.models.registration import (
    STATUS_CONFIRMED,
    STATUSES,
    Registration,
    RegistrationEvent,
)
from blitzweek.services.identity import format_name, normalize_email, normalize_roll_number
from blitzweek.services.registration_number import generate_registration_number
from blitzweek.services.validation import validate_registration

logger = logging.getLogger(__name__)

# Checked in this order against the driver's unique-violation message
UNIQUE_FIELDS = ("ldap_id", "roll_number", "registration_number")

DUPLICATE_MESSAGES = {
    "ldap_id": "This LDAP ID is already registered",
    "roll_number": "This Roll Number is already registered",
}

SORT_FIELDS = {
    "registrationDate": Registration.registration_date,
    "registrationNumber": Registration.registration_number,
    "name": Registration.name,
    "ldapId": Registration.ldap_id,
    "rollNumber": Registration.roll_number,
    "branch": Registration.branch,
    "year": Registration.year,
    "status": Registration.status,
}
DEFAULT_SORT = "registrationDate"

EXPORT_COLUMNS = [
    "Registration Number",
    "Name",
    "LDAP ID",
    "Roll Number",
    "Branch",
    "Year",
    "Events",
    "Phone",
    "Registration Date",
    "Status",
]


# ==============================================================================
# Projections
# ==============================================================================

def event_names(registration: Registration) -> List[str]:
    return [item.event for item in registration.events]


def public_projection(registration: Registration) -> Dict[str, Any]:
    """Fields returned to the participant after a successful sign-up."""
    return {
        "registrationNumber": registration.registration_number,
        "name": registration.name,
        "ldapId": registration.ldap_id,
        "rollNumber": registration.roll_number,
        "events": event_names(registration),
        "registrationDate": registration.registration_date.isoformat(),
    }


def registration_summary(registration: Registration) -> Dict[str, Any]:
    return {
        "registrationNumber": registration.registration_number,
        "name": registration.name,
        "formattedName": format_name(registration.name),
        "events": event_names(registration),
        "registrationDate": registration.registration_date.isoformat(),
    }


def to_read_dict(registration: Registration) -> Dict[str, Any]:
    """Full record without the audit fields."""
    return {
        "id": registration.id,
        "registrationNumber": registration.registration_number,
        "name": registration.name,
        "ldapId": registration.ldap_id,
        "rollNumber": registration.roll_number,
        "branch": registration.branch,
        "year": registration.year,
        "interestedEvents": event_names(registration),
        "phoneNumber": registration.phone_number,
        "registrationDate": registration.registration_date.isoformat(),
        "status": registration.status,
        "createdAt": registration.created_at.isoformat(),
        "updatedAt": registration.updated_at.isoformat(),
    }


def to_export_row(registration: Registration) -> Dict[str, str]:
    return {
        "Registration Number": registration.registration_number,
        "Name": registration.name,
        "LDAP ID": registration.ldap_id,
        "Roll Number": registration.roll_number,
        "Branch": registration.branch,
        "Year": registration.year,
        "Events": ", ".join(event_names(registration)),
        "Phone": registration.phone_number or "N/A",
        "Registration Date": registration.registration_date.strftime("%Y-%m-%d %H:%M:%S"),
        "Status": registration.status,
    }


# ==============================================================================
# Lookups
# ==============================================================================

def find_existing(db: Session, ldap_id: str, roll_number: str) -> Optional[Registration]:
    """Any record colliding on either identity field."""
    return db.query(Registration).filter(
        or_(
            Registration.ldap_id == normalize_email(ldap_id),
            Registration.roll_number == normalize_roll_number(roll_number),
        )
    ).first()


def find_by_number(db: Session, registration_number: str) -> Optional[Registration]:
    return db.query(Registration).filter(
        Registration.registration_number == registration_number.strip()
    ).first()


def _violated_field(error: IntegrityError) -> Optional[str]:
    detail = str(error.orig)
    for field in UNIQUE_FIELDS:
        if field in detail:
            return field
    return None


# ==============================================================================
# Workflow
# ==============================================================================

def _build_registration(data: Dict[str, Any], ip_address: Optional[str], user_agent: Optional[str]) -> Registration:
    registration = Registration(
        name=data["name"],
        ldap_id=data["ldap_id"],
        roll_number=data["roll_number"],
        branch=data["branch"],
        year=data["year"],
        phone_number=data["phone_number"],
        status=STATUS_CONFIRMED,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    registration.events = [
        RegistrationEvent(event=event, position=position)
        for position, event in enumerate(data["interested_events"])
    ]
    return registration


def _duplicate_after_race(db: Session, data: Dict[str, Any], field: str) -> DuplicateRegistration:
    if field == "ldap_id":
        existing = db.query(Registration).filter(Registration.ldap_id == data["ldap_id"]).first()
    else:
        existing = db.query(Registration).filter(Registration.roll_number == data["roll_number"]).first()

    return DuplicateRegistration(
        DUPLICATE_MESSAGES[field],
        registration_number=existing.registration_number if existing else None,
        registration_date=existing.registration_date if existing else None,
    )


def register(
    db: Session,
    candidate: Dict[str, Any],
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Register a participant.

    Args:
        db: Database session
        candidate: Request body keyed by API names
        ip_address: Origin address, stored for audit only
        user_agent: Client signature, stored for audit only

    Returns:
        Public projection of the stored registration

    Raises:
        ValidationError: if any field is malformed
        DuplicateRegistration: if the LDAP ID or roll number is taken, whether
            found by the pre-check or rejected by the unique constraints
        InternalFailure: if the store fails or no free registration number
            is found
    """
    data = validate_registration(candidate)

    # The unique constraints are the real guard; this only gives a better answer
    existing = find_existing(db, data["ldap_id"], data["roll_number"])
    if existing:
        logger.info(f"Duplicate registration attempt for {data['ldap_id']} / {data['roll_number']}")
        raise DuplicateRegistration(
            registration_number=existing.registration_number,
            registration_date=existing.registration_date,
        )

    for attempt in range(settings.REGISTRATION_NUMBER_MAX_ATTEMPTS):
        registration = _build_registration(data, ip_address, user_agent)
        registration.registration_number = generate_registration_number(db, after_collision=attempt > 0)
        db.add(registration)

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            field = _violated_field(e)
            if field == "registration_number":
                logger.warning(
                    f"⚠️ Registration number {registration.registration_number} taken, retrying"
                )
                continue
            if field in DUPLICATE_MESSAGES:
                logger.info(f"Concurrent duplicate rejected by store on {field} for {data['ldap_id']}")
                raise _duplicate_after_race(db, data, field)
            logger.error(f"❌ Unexpected integrity error during registration: {e}")
            raise InternalFailure()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Registration commit failed: {e}", exc_info=True)
            raise InternalFailure()

        db.refresh(registration)
        logger.info(f"✅ Registered {registration.ldap_id} as {registration.registration_number}")
        return public_projection(registration)

    logger.error(
        f"❌ No free registration number after {settings.REGISTRATION_NUMBER_MAX_ATTEMPTS} attempts"
    )
    raise InternalFailure()


def check_status(db: Session, identifier: str) -> Dict[str, Any]:
    """Look a participant up by LDAP ID (contains ``@``) or roll number."""
    if "@" in identifier:
        query = Registration.ldap_id == normalize_email(identifier)
    else:
        query = Registration.roll_number == normalize_roll_number(identifier)

    registration = db.query(Registration).filter(query).first()
    if not registration:
        raise NotFound("No registration found")

    return registration_summary(registration)


# ==============================================================================
# Administration
# ==============================================================================

def list_registrations(
    db: Session,
    page: int = 1,
    limit: Optional[int] = None,
    event: Optional[str] = None,
    branch: Optional[str] = None,
    year: Optional[str] = None,
    sort_by: str = DEFAULT_SORT,
    order: str = "desc",
) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Filtered, sorted page of registrations (pages are 1-based)."""
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    errors = []
    if page < 1:
        errors.append({"field": "page", "message": "Page must be 1 or greater"})
    if limit < 1:
        errors.append({"field": "limit", "message": "Limit must be 1 or greater"})
    if errors:
        raise ValidationError(errors)
    limit = min(limit, settings.MAX_PAGE_SIZE)

    query = db.query(Registration)
    if event:
        query = query.filter(Registration.events.any(RegistrationEvent.event == event))
    if branch:
        query = query.filter(Registration.branch == branch)
    if year:
        query = query.filter(Registration.year == year)

    total_count = query.count()

    if sort_by not in SORT_FIELDS:
        logger.warning(f"Unknown sort field '{sort_by}', using {DEFAULT_SORT}")
        sort_by = DEFAULT_SORT
    column = SORT_FIELDS[sort_by]
    if order == "asc":
        ordering = (column.asc(), Registration.id.asc())
    else:
        ordering = (column.desc(), Registration.id.desc())

    rows = query.order_by(*ordering).offset((page - 1) * limit).limit(limit).all()

    pagination = {
        "currentPage": page,
        "totalPages": math.ceil(total_count / limit),
        "totalCount": total_count,
        "limit": limit,
    }
    return [to_read_dict(r) for r in rows], pagination


def get_by_number(db: Session, registration_number: str) -> Dict[str, Any]:
    registration = find_by_number(db, registration_number)
    if not registration:
        raise NotFound()
    return to_read_dict(registration)


def update_status(db: Session, registration_number: str, status: Optional[str]) -> Dict[str, Any]:
    """Change only the status of a registration."""
    if status not in STATUSES:
        raise InvalidStatus()

    registration = find_by_number(db, registration_number)
    if not registration:
        raise NotFound()

    previous = registration.status
    registration.status = status
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Status update failed for {registration_number}: {e}")
        raise InternalFailure()

    db.refresh(registration)
    logger.info(f"🔄 [Admin] {registration_number} status {previous} -> {status}")
    return to_read_dict(registration)


def delete_registration(db: Session, registration_number: str) -> str:
    registration = find_by_number(db, registration_number)
    if not registration:
        raise NotFound()

    ldap_backup = registration.ldap_id  # Keep for logging
    try:
        db.delete(registration)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ DB Delete failed for {registration_number}: {e}")
        raise InternalFailure()

    logger.info(f"🗑️ [Admin] Deleted registration {registration_number} ({ldap_backup})")
    return registration_number


def export_registrations(db: Session) -> List[Dict[str, str]]:
    """Flattened rows, newest first, ready for CSV conversion."""
    rows = db.query(Registration).order_by(
        Registration.registration_date.desc(), Registration.id.desc()
    ).all()
    return [to_export_row(r) for r in rows]
