"""Human-readable registration numbers: ``BW<year><NNNN>``."""
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from blitzweek.core.config import settings
from blitzweek.db.base import utcnow
from blitzweek.models.registration import Registration


def count_registrations(db: Session) -> int:
    return db.query(Registration).count()


def highest_sequence(db: Session, year: int) -> int:
    """Largest sequence already issued for ``year``, 0 when none."""
    prefix = format_registration_number(year, 0)[:-4]
    column = Registration.registration_number
    # Longer numbers sort after shorter ones, so "...10000" beats "...9999"
    latest = (
        db.query(column)
        .filter(column.like(f"{prefix}%"))
        .order_by(func.length(column).desc(), column.desc())
        .first()
    )
    if latest is None:
        return 0
    suffix = latest[0][len(prefix):]
    return int(suffix) if suffix.isdigit() else 0


def format_registration_number(year: int, sequence: int, prefix: Optional[str] = None) -> str:
    prefix = settings.REGISTRATION_NUMBER_PREFIX if prefix is None else prefix
    return f"{prefix}{year}{sequence:04d}"


def generate_registration_number(
    db: Session, now: Optional[datetime] = None, after_collision: bool = False
) -> str:
    """
    Derive the next registration number.

    The first candidate is ``count + 1``. The count is read without a lock, so
    two concurrent writers can derive the same number, and admin deletes leave
    the count behind numbers already issued. The unique constraint on
    ``registration_number`` rejects such an insert and the caller asks again
    with ``after_collision=True``, which continues from the highest number
    issued this year instead.
    """
    now = now or utcnow()
    if after_collision:
        return format_registration_number(now.year, highest_sequence(db, now.year) + 1)
    return format_registration_number(now.year, count_registrations(db) + 1)
