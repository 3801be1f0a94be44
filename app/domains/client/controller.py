"""Client API controller with FastAPI endpoints."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, validate_token
from app.domains.client.records import ClientRecordsService
from app.domains.client.service import ClientService
from app.exceptions.files import ClientNotFoundError
from app.schemas.base import ResponseSchema
from app.schemas.client import (
    ClientCreate,
    ClientListResponse,
    ClientMatch,
    ClientResponse,
    ClientSearchResponse,
    CommunicationCreate,
    FinancialTransactionCreate,
)
from app.shared.pagination import PaginationParams
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/clients",
    tags=["clients"],
    dependencies=[Depends(validate_token)],  # Global token validation for all routes
)


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_client(
    client_data: ClientCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Register a new client."""
    service = ClientService(db)
    client = await service.create_client(client_data)
    logger.info(f"User {current_user.id} registered client {client.id}")

    return ResponseSchema(
        status="success",
        message="Client created successfully",
        data=ClientResponse.model_validate(client).model_dump(mode="json"),
    )


@router.get("", response_model=ClientListResponse)
async def get_clients(
    search: Optional[str] = Query(None, description="Substring match on name, email or phone"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get paginated list of clients."""
    service = ClientService(db)
    result = await service.get_clients_list(
        search=search, pagination=PaginationParams(page=page, size=size)
    )

    return ClientListResponse(
        clients=[ClientResponse.model_validate(c) for c in result.items],
        total=result.total,
        page=result.page,
        size=result.size,
        has_next=result.has_next,
        has_prev=result.has_prev,
    )


@router.get("/search", response_model=ResponseSchema)
async def search_clients(
    q: str = Query(..., min_length=1, description="Client name, email or phone"),
    threshold: Optional[float] = Query(None, gt=0.0, le=1.0),
    limit: int = Query(5, ge=1, le=25),
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Similarity-scored client search."""
    service = ClientService(db)
    rows = await service.search_clients_precise(
        q, similarity_threshold=threshold, max_results=limit
    )

    matches = []
    for row in rows:
        client = await service.get_client_by_id(UUID(row["id"]))
        if client:
            matches.append(
                ClientMatch(
                    client=ClientResponse.model_validate(client),
                    similarity=row["similarity"],
                    exact=row["match_type"] == "exact",
                )
            )

    return ResponseSchema(
        status="success",
        message=f"Found {len(matches)} matching client(s)",
        data=ClientSearchResponse(query=q, matches=matches).model_dump(mode="json"),
    )


@router.get("/{client_id}", response_model=ResponseSchema)
async def get_client(
    client_id: UUID = Path(..., description="Client ID"),
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a client by ID."""
    service = ClientService(db)
    client = await service.get_client_by_id(client_id)
    if not client:
        raise ClientNotFoundError()

    return ResponseSchema(
        status="success",
        message="Client retrieved successfully",
        data=ClientResponse.model_validate(client).model_dump(mode="json"),
    )


@router.delete("/{client_id}", response_model=ResponseSchema)
async def delete_client(
    client_id: UUID = Path(..., description="Client ID"),
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a client. Files stored under the client's name are kept."""
    service = ClientService(db)
    await service.delete_client(client_id)

    return ResponseSchema(status="success", message="Client deleted successfully", data=None)


@router.post("/transactions", response_model=ResponseSchema, status_code=201)
async def add_financial_transaction(
    transaction_data: FinancialTransactionCreate,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a quote, payment or adjustment on a client's account."""
    result = await ClientRecordsService(db).add_financial_transaction(transaction_data)

    return ResponseSchema(status="success", message=result.message, data=result.model_dump(mode="json"))


@router.post("/communications", response_model=ResponseSchema, status_code=201)
async def add_communication(
    communication_data: CommunicationCreate,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add an entry to a client's communication log."""
    result = await ClientRecordsService(db).add_communication(communication_data)

    return ResponseSchema(status="success", message=result.message, data=result.model_dump(mode="json"))


@router.get("/{client_id}/balance", response_model=ResponseSchema)
async def get_client_balance(
    client_id: UUID = Path(..., description="Client ID"),
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Account totals for a client."""
    if not await ClientService(db).get_client_by_id(client_id):
        raise ClientNotFoundError()
    balance = await ClientRecordsService(db).get_balance(client_id)

    return ResponseSchema(
        status="success",
        message="Balance retrieved successfully",
        data={**balance.model_dump(mode="json"), "balance": str(balance.balance)},
    )
