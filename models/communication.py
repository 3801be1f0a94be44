"""
Communication log model for contact with clients.
"""

import enum

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text

from .base import UUID, BaseModel, utcnow


class CommunicationType(str, enum.Enum):
    PHONE_CALL = "phone_call"
    EMAIL = "email"
    MEETING = "meeting"
    SMS = "sms"
    LETTER = "letter"
    COURT_HEARING = "court_hearing"
    OTHER = "other"


class CommunicationDirection(str, enum.Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class CommunicationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum(enum_cls):
    return Enum(enum_cls, values_callable=lambda e: [m.value for m in e])


class Communication(BaseModel):
    """A logged call, email, meeting or other contact with a client."""

    __tablename__ = "communications"

    client_id = Column(UUID(), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    communication_date = Column(DateTime, nullable=False, default=utcnow)
    communication_type = Column(_enum(CommunicationType), nullable=False)
    direction = Column(_enum(CommunicationDirection), nullable=False)
    priority = Column(_enum(CommunicationPriority), nullable=False, default=CommunicationPriority.MEDIUM)
    subject = Column(String(255), nullable=True)
    notes = Column(Text, nullable=False)
    follow_up_required = Column(Boolean, nullable=False, default=False)
    follow_up_date = Column(Date, nullable=True)
    follow_up_notes = Column(Text, nullable=True)
    related_case_number = Column(String(100), nullable=True)
    court_date = Column(Date, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    outcome = Column(Text, nullable=True)
    next_action = Column(Text, nullable=True)
