"""Read-only statistics over confirmed registrations."""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from blitzweek.core.config import settings
from blitzweek.core.exceptions import InvalidEvent
from blitzweek.db.base import utcnow
from blitzweek.models.registration import (
    EVENT_BLITZ,
    EVENT_BOTH,
    EVENT_IGNITE,
    EVENTS,
    STATUS_CONFIRMED,
    Registration,
    RegistrationEvent,
)
from blitzweek.services.registration_service import event_names

logger = logging.getLogger(__name__)


def percentage(count: int, total: int) -> str:
    """``count`` as a share of ``total``, two decimals, ``"0.00%"`` when empty."""
    if total <= 0:
        return "0.00%"
    return f"{count / total * 100:.2f}%"


def _confirmed(db: Session):
    return db.query(Registration).filter(Registration.status == STATUS_CONFIRMED)


def _total(db: Session) -> int:
    return _confirmed(db).count()


def _event_counts(db: Session) -> Dict[str, int]:
    rows = (
        db.query(RegistrationEvent.event, func.count(RegistrationEvent.id))
        .join(Registration, RegistrationEvent.registration_id == Registration.id)
        .filter(Registration.status == STATUS_CONFIRMED)
        .group_by(RegistrationEvent.event)
        .all()
    )
    return {event: count for event, count in rows}


def _group_counts(db: Session, column, event: Optional[str] = None) -> List[Tuple[str, int]]:
    query = db.query(column, func.count(Registration.id)).filter(
        Registration.status == STATUS_CONFIRMED
    )
    if event:
        query = query.filter(Registration.events.any(RegistrationEvent.event == event))
    return query.group_by(column).all()


def _by_count(rows) -> list:
    return sorted(rows, key=lambda row: (-row[1], row[0]))


def _by_name(rows) -> list:
    return sorted(rows, key=lambda row: row[0])


def _distribution(rows, key: str, total: int) -> List[Dict[str, Any]]:
    return [
        {key: name, "count": count, "percentage": percentage(count, total)}
        for name, count in rows
    ]


def _daily_trend(db: Session, now: datetime) -> List[Dict[str, Any]]:
    """Zero-filled counts for the trailing calendar days, oldest first."""
    first_day = now.date() - timedelta(days=settings.TREND_DAYS - 1)
    start = datetime.combine(first_day, datetime.min.time())

    day = func.date(Registration.registration_date).label("day")
    rows = (
        db.query(day, func.count(Registration.id))
        .filter(Registration.status == STATUS_CONFIRMED)
        .filter(Registration.registration_date >= start)
        .group_by(day)
        .all()
    )
    # SQLite returns the day as text, PostgreSQL as a date
    counts = {str(d): count for d, count in rows}

    days = [first_day + timedelta(days=offset) for offset in range(settings.TREND_DAYS)]
    return [{"date": d.isoformat(), "count": counts.get(d.isoformat(), 0)} for d in days]


def _hourly_distribution(db: Session) -> List[Dict[str, Any]]:
    hour = extract("hour", Registration.registration_date).label("hour")
    rows = (
        db.query(hour, func.count(Registration.id))
        .filter(Registration.status == STATUS_CONFIRMED)
        .group_by(hour)
        .all()
    )
    counts = {int(h): count for h, count in rows}
    return [{"hour": f"{h}:00", "count": counts.get(h, 0)} for h in range(24)]


def _recent(db: Session) -> List[Dict[str, Any]]:
    rows = (
        _confirmed(db)
        .order_by(Registration.registration_date.desc(), Registration.id.desc())
        .limit(settings.RECENT_REGISTRATIONS_LIMIT)
        .all()
    )
    return [
        {
            "registrationNumber": r.registration_number,
            "name": r.name,
            "rollNumber": r.roll_number,
            "branch": r.branch,
            "interestedEvents": event_names(r),
            "registrationDate": r.registration_date.isoformat(),
        }
        for r in rows
    ]


def get_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Dashboard statistics: totals, distributions, trends, recent sign-ups."""
    now = now or utcnow()
    total = _total(db)
    event_counts = _event_counts(db)

    return {
        "summary": {
            "totalRegistrations": total,
            "bothEventsPercentage": percentage(event_counts.get(EVENT_BOTH, 0), total),
            "lastUpdated": now.isoformat(),
        },
        "distributions": {
            "events": _distribution(_by_count(event_counts.items()), "event", total),
            "branches": _distribution(
                _by_count(_group_counts(db, Registration.branch)), "branch", total
            ),
            "years": _distribution(
                _by_name(_group_counts(db, Registration.year)), "year", total
            ),
        },
        "trends": {
            "daily": _daily_trend(db, now),
            "hourly": _hourly_distribution(db),
        },
        "recentRegistrations": _recent(db),
    }


def get_live_count(db: Session) -> Dict[str, int]:
    event_counts = _event_counts(db)
    return {
        "total": _total(db),
        "blitz": event_counts.get(EVENT_BLITZ, 0),
        "ignite": event_counts.get(EVENT_IGNITE, 0),
        "both": event_counts.get(EVENT_BOTH, 0),
    }


def get_event_stats(db: Session, event_name: str) -> Dict[str, Any]:
    """Branch and year breakdown of the participants of one event."""
    if event_name not in EVENTS:
        logger.warning(f"Stats requested for unknown event '{event_name}'")
        raise InvalidEvent()

    total = _confirmed(db).filter(
        Registration.events.any(RegistrationEvent.event == event_name)
    ).count()
    branches = _by_count(_group_counts(db, Registration.branch, event=event_name))
    years = _by_name(_group_counts(db, Registration.year, event=event_name))

    return {
        "event": event_name,
        "totalRegistrations": total,
        "branchDistribution": [{"branch": b, "count": c} for b, c in branches],
        "yearDistribution": [{"year": y, "count": c} for y, c in years],
    }
