"""Client account and communication records."""

import logging
from decimal import Decimal

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.logging import log_event
from app.domains.client.service import ClientService
from app.exceptions.base import ValidationError
from app.exceptions.files import ClientNotFoundError
from app.schemas.client import (
    ClientBalance,
    CommunicationCreate,
    CommunicationResponse,
    CommunicationResult,
    FinancialTransactionCreate,
    FinancialTransactionResponse,
    TransactionResult,
)
from models.base import utcnow
from models.client import Client
from models.communication import Communication
from models.financial_transaction import FinancialTransaction, TransactionType

logger = logging.getLogger(__name__)


def format_amount(value: Decimal) -> str:
    return f"${value:,.2f}"


def transaction_message(
    data: FinancialTransactionCreate, client_name: str, balance: Decimal
) -> str:
    """Confirmation sentence for a recorded transaction."""
    amount = format_amount(data.amount)
    described = f' for "{data.service_description}"' if data.service_description else ""

    if data.transaction_type == TransactionType.QUOTE:
        return f"Successfully created quote of {amount} for {client_name}{described}."
    if data.transaction_type == TransactionType.PAYMENT:
        message = f"Successfully recorded payment of {amount} from {client_name} via {data.payment_method}"
        if balance > 0:
            return f"{message}. Remaining balance: {format_amount(balance)}."
        return f"{message}. Account is now fully paid."

    message = f"Successfully recorded adjustment of {amount} for {client_name}{described}"
    if balance != 0:
        return f"{message}. New balance: {format_amount(balance)}."
    return f"{message}."


def communication_message(data: CommunicationCreate, client_name: str) -> str:
    """Confirmation sentence for a logged communication."""
    kind = data.communication_type.value.replace("_", " ")
    message = f"Successfully recorded {data.direction.value} {kind}"
    if data.subject:
        message += f' about "{data.subject}"'
    message += f" for {client_name}."
    if data.follow_up_required and data.follow_up_date:
        message += f" Follow-up scheduled for {data.follow_up_date.isoformat()}."
    if data.outcome:
        message += f" Outcome: {data.outcome}."
    if data.next_action:
        message += f" Next action: {data.next_action}."
    return message


class ClientRecordsService:
    """Service class for a client's financial and communication records."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.clients = ClientService(db)

    async def add_financial_transaction(self, data: FinancialTransactionCreate) -> TransactionResult:
        """Record a quote, payment or adjustment and report the new balance.

        Raises:
            ClientNotFoundError: No registered client has that name.
            ValidationError: The row could not be written.
        """
        client = await self._require_client(data.client_name)

        transaction = FinancialTransaction(
            client_id=client.id,
            transaction_type=data.transaction_type,
            amount=data.amount,
            payment_method=data.payment_method,
            case_number=data.case_number,
            service_description=data.service_description,
            notes=data.notes,
            transaction_date=data.transaction_date or utcnow().date(),
        )
        try:
            self.db.add(transaction)
            await self.db.commit()
            await self.db.refresh(transaction)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ValidationError(f"Failed to record transaction: {str(e)}")

        balance = (await self.get_balance(client.id)).balance
        log_event(
            logger, "financial_transaction", "recorded",
            client_id=str(client.id), transaction_type=data.transaction_type.value,
        )
        return TransactionResult(
            message=transaction_message(data, client.client_name, balance),
            client_name=client.client_name,
            transaction=FinancialTransactionResponse.model_validate(transaction),
            balance=balance,
        )

    async def get_balance(self, client_id) -> ClientBalance:
        """Totals across every transaction on the client's account."""
        is_quote = FinancialTransaction.transaction_type == TransactionType.QUOTE
        quoted = case((is_quote, FinancialTransaction.amount), else_=0)
        paid = case((~is_quote, FinancialTransaction.amount), else_=0)
        stmt = select(
            func.coalesce(func.sum(quoted), 0),
            func.coalesce(func.sum(paid), 0),
            func.count(FinancialTransaction.id),
        ).where(FinancialTransaction.client_id == client_id)
        total_quoted, total_paid, count = (await self.db.execute(stmt)).one()
        return ClientBalance(
            total_quoted=Decimal(str(total_quoted)),
            total_paid=Decimal(str(total_paid)),
            transaction_count=count,
        )

    async def add_communication(self, data: CommunicationCreate) -> CommunicationResult:
        """Add a call, email, meeting or other contact to the client's log.

        Raises:
            ClientNotFoundError: No registered client has that name.
            ValidationError: The row could not be written.
        """
        client = await self._require_client(data.client_name)

        communication = Communication(
            client_id=client.id,
            **data.model_dump(exclude={"client_name"}),
        )
        try:
            self.db.add(communication)
            await self.db.commit()
            await self.db.refresh(communication)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ValidationError(f"Failed to record communication: {str(e)}")

        log_event(
            logger, "communication", "recorded",
            client_id=str(client.id), communication_type=data.communication_type.value,
        )
        return CommunicationResult(
            message=communication_message(data, client.client_name),
            client_name=client.client_name,
            communication=CommunicationResponse.model_validate(communication),
        )

    async def _require_client(self, client_name: str) -> Client:
        client = await self.clients.get_client_by_name(client_name)
        if not client:
            raise ClientNotFoundError(
                f'Client "{client_name}" not found. Please check the name and try again.',
                details={"client_name": client_name},
            )
        return client
