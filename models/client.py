"""
Client model for the firm's client registry.
"""

import enum

from sqlalchemy import Column, Date, Enum, String, Text

from .base import BaseModel


class ClientType(str, enum.Enum):
    """Practice area a client belongs to."""

    CRIMINAL = "criminal"
    CIVIL = "civil"


class Client(BaseModel):
    """
    Represents a client of the firm. Stored files are associated with a
    client by canonical ``client_name``.
    """

    __tablename__ = "clients"

    client_name = Column(String(255), nullable=False, unique=True, index=True)
    client_type = Column(Enum(ClientType, values_callable=lambda e: [m.value for m in e]), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    date_intake = Column(Date, nullable=True)
