from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from blitzweek.db.base import Base, BaseModel, utcnow

EVENT_BLITZ = "ScaleUp Blitz"
EVENT_IGNITE = "ScaleUp Ignite"
EVENT_BOTH = "Both"  # its own selection, never expanded into the other two
EVENTS = [EVENT_BLITZ, EVENT_IGNITE, EVENT_BOTH]

BRANCHES = [
    "Aerospace Engineering",
    "Chemical Engineering",
    "Civil Engineering",
    "Computer Science and Engineering",
    "Electrical Engineering",
    "Engineering Physics",
    "Environmental Science and Engineering",
    "Mechanical Engineering",
    "Metallurgical Engineering and Materials Science",
    "Biosciences and Bioengineering",
    "Chemistry",
    "Earth Sciences",
    "Mathematics",
    "Physics",
    "Climate Studies",
    "Educational Technology",
    "Energy Science and Engineering",
    "Systems and Control Engineering",
    "Technology and Development",
    "Economics",
    "Other",
]

YEARS = ["1st Year", "2nd Year", "3rd Year", "4th Year", "5th Year", "MTech", "PhD", "Other"]

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUSES = [STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED]


class Registration(Base, BaseModel):
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("ldap_id", name="uq_registrations_ldap_id"),
        UniqueConstraint("roll_number", name="uq_registrations_roll_number"),
        UniqueConstraint("registration_number", name="uq_registrations_registration_number"),
    )

    # Participant
    name = Column(String, nullable=False)
    ldap_id = Column(String, nullable=False)
    roll_number = Column(String, nullable=False)
    branch = Column(String, nullable=False, index=True)
    year = Column(String, nullable=False, index=True)
    phone_number = Column(String, nullable=True)

    # Registration
    registration_number = Column(String, nullable=False)
    registration_date = Column(DateTime, default=utcnow, nullable=False, index=True)
    status = Column(String, default=STATUS_CONFIRMED, nullable=False, index=True)

    # Audit (write-once, never serialized)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    events = relationship(
        "RegistrationEvent",
        back_populates="registration",
        cascade="all, delete-orphan",
        order_by="RegistrationEvent.position",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Registration {self.registration_number} ({self.ldap_id})>"


class RegistrationEvent(Base):
    """One selected event of a registration."""

    __tablename__ = "registration_events"
    __table_args__ = (
        UniqueConstraint("registration_id", "event", name="uq_registration_events_event"),
    )

    id = Column(Integer, primary_key=True)
    registration_id = Column(
        Integer, ForeignKey("registrations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    registration = relationship("Registration", back_populates="events")

    def __repr__(self):
        return f"<RegistrationEvent {self.event}>"
