"""Client schemas for request/response serialization."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator, model_validator

from models.client import ClientType
from models.communication import CommunicationDirection, CommunicationPriority, CommunicationType
from models.financial_transaction import TransactionType

from .base import BaseModelSchema, BaseSchema, CamelSchema


class ClientBase(BaseSchema):
    """Base client schema with common fields."""

    client_name: str = Field(..., min_length=1, max_length=255)
    client_type: ClientType | None = None
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    notes: str | None = None
    date_intake: date | None = None

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, v: str) -> str:
        """Validate and clean the client name."""
        if isinstance(v, str):
            v = " ".join(v.split())
            if not v:
                raise ValueError("Client name cannot be empty or only whitespace")
        return v


class ClientCreate(ClientBase):
    """Schema for creating a new client."""


class ClientResponse(BaseModelSchema, ClientBase):
    """Schema for client response."""

    model_config = ConfigDict(from_attributes=True)


class ClientListResponse(BaseSchema):
    """Schema for client list response."""

    clients: list[ClientResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class ClientMatch(BaseSchema):
    """A registry client scored against a search query."""

    client: ClientResponse
    similarity: float = Field(..., ge=0.0, le=1.0)
    exact: bool = False


class ClientSearchResponse(BaseSchema):
    """Schema for client search results."""

    query: str
    matches: list[ClientMatch]


class FinancialTransactionCreate(CamelSchema):
    """A quote, payment or adjustment recorded against a client by name."""

    client_name: str = Field(..., min_length=1, max_length=255)
    transaction_type: TransactionType
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str | None = Field(None, max_length=50)
    case_number: str | None = Field(None, max_length=100)
    service_description: str | None = None
    notes: str | None = None
    transaction_date: date | None = None

    @model_validator(mode="after")
    def require_payment_method(self) -> FinancialTransactionCreate:
        if self.transaction_type == TransactionType.PAYMENT and not self.payment_method:
            raise ValueError("Payment method is required for payments")
        return self


class FinancialTransactionResponse(BaseModelSchema):
    client_id: UUID
    transaction_type: TransactionType
    amount: Decimal
    payment_method: str | None = None
    case_number: str | None = None
    service_description: str | None = None
    notes: str | None = None
    transaction_date: date


class ClientBalance(BaseSchema):
    """Running account totals for a client.

    Payments and adjustments both count towards ``total_paid``.
    """

    total_quoted: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    transaction_count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.total_quoted - self.total_paid


class TransactionResult(BaseSchema):
    """Outcome of recording a transaction, with the confirmation message."""

    message: str
    client_name: str
    transaction: FinancialTransactionResponse
    balance: Decimal


class CommunicationCreate(CamelSchema):
    """A contact with a client to add to the communication log."""

    client_name: str = Field(..., min_length=1, max_length=255)
    communication_type: CommunicationType
    direction: CommunicationDirection
    priority: CommunicationPriority = CommunicationPriority.MEDIUM
    subject: str | None = Field(None, max_length=255)
    notes: str = Field(..., min_length=1)
    follow_up_required: bool = False
    follow_up_date: date | None = None
    follow_up_notes: str | None = None
    related_case_number: str | None = Field(None, max_length=100)
    court_date: date | None = None
    duration_minutes: int | None = Field(None, ge=0)
    outcome: str | None = None
    next_action: str | None = None

    @model_validator(mode="after")
    def require_follow_up_date(self) -> CommunicationCreate:
        if self.follow_up_required and not self.follow_up_date:
            raise ValueError("Follow-up date is required when a follow-up is needed")
        return self


class CommunicationResponse(BaseModelSchema):
    client_id: UUID
    communication_date: datetime
    communication_type: CommunicationType
    direction: CommunicationDirection
    priority: CommunicationPriority
    subject: str | None = None
    notes: str
    follow_up_required: bool
    follow_up_date: date | None = None
    outcome: str | None = None
    next_action: str | None = None


class CommunicationResult(BaseSchema):
    message: str
    client_name: str
    communication: CommunicationResponse


class ClientProfileResponse(BaseSchema):
    """Clients matching a profile query, best first."""

    query: str
    result_count: int
    clients: list[ClientResponse]
