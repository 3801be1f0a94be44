"""Client registry service layer."""

import difflib
import logging
import re
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.config import settings
from app.exceptions.base import ValidationError
from app.exceptions.files import ClientAlreadyExistsError, ClientNotFoundError
from app.schemas.client import ClientCreate
from app.shared.pagination import Page, PaginationParams, paginate
from models.client import Client

logger = logging.getLogger(__name__)

# Upper bound on rows scanned for fuzzy scoring
FUZZY_CANDIDATE_LIMIT = 1000


def normalize_name(value: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    value = re.sub(r"[^a-z0-9\s]", " ", (value or "").lower())
    return re.sub(r"\s+", " ", value).strip()


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def name_similarity(query: str, candidate: str) -> float:
    """Similarity of two client names in ``[0, 1]``.

    ``SequenceMatcher`` ratio on normalized names, plus 0.1 when the candidate
    starts with the query and 0.05 when it contains it.
    """
    q = normalize_name(query)
    c = normalize_name(candidate)
    if not q or not c:
        return 0.0
    score = difflib.SequenceMatcher(None, q, c).ratio()
    if c.startswith(q):
        score += 0.1
    if q in c:
        score += 0.05
    return min(score, 1.0)


class ClientService:
    """Service class for client registry business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_client(self, client_data: ClientCreate) -> Client:
        """Create a new client."""
        existing = await self.get_client_by_name(client_data.client_name)
        if existing:
            raise ClientAlreadyExistsError(
                f'A client named "{existing.client_name}" already exists',
                details={"client_id": str(existing.id)},
            )

        client = Client(**client_data.model_dump())

        try:
            self.db.add(client)
            await self.db.commit()
            await self.db.refresh(client)
            logger.info(f"Created client {client.id} ({client.client_name})")
            return client
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ValidationError(f"Failed to create client: {str(e)}")

    async def get_client_by_id(self, client_id: UUID) -> Optional[Client]:
        """Get a client by ID."""
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_client_by_name(self, client_name: str) -> Optional[Client]:
        """Get a client by name, case-insensitively."""
        stmt = select(Client).where(func.lower(Client.client_name) == client_name.strip().lower())
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_clients_list(
        self,
        search: Optional[str] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Page:
        """Get paginated list of clients with an optional substring filter."""
        stmt = select(Client)

        if search:
            search_term = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Client.client_name.ilike(search_term),
                    Client.email.ilike(search_term),
                    Client.phone.ilike(search_term),
                )
            )

        stmt = stmt.order_by(desc(Client.updated_at))
        return await paginate(self.db, stmt, pagination or PaginationParams())

    async def delete_client(self, client_id: UUID) -> bool:
        """Delete a client. Stored files keep their client name."""
        client = await self.get_client_by_id(client_id)
        if not client:
            raise ClientNotFoundError()

        try:
            await self.db.delete(client)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise ValidationError(f"Failed to delete client: {str(e)}")

    async def search_clients_precise(
        self,
        search_query: str,
        similarity_threshold: float | None = None,
        max_results: int = 1,
    ) -> List[Dict[str, Any]]:
        """Score registry clients against a free-text query.

        Exact case-insensitive matches on name, email or phone come first with
        similarity 1.0; otherwise names scoring at or above
        ``similarity_threshold`` are returned, best first.

        Returns:
            Rows shaped ``{"id", "client_name", "similarity", "match_type"}``.
        """
        threshold = (
            settings.client_match_threshold if similarity_threshold is None else similarity_threshold
        )
        query = (search_query or "").strip()
        if not query:
            return []

        lowered = query.lower()
        digits = _digits(query)
        exact_conditions = [
            func.lower(Client.client_name) == lowered,
            func.lower(Client.email) == lowered,
        ]
        if len(digits) >= 7:
            exact_conditions.append(Client.phone == query)

        result = await self.db.execute(select(Client).where(or_(*exact_conditions)))
        exact = list(result.scalars().all())

        if not exact and len(digits) >= 7:
            # Phone numbers are stored in whatever format intake used
            result = await self.db.execute(select(Client).where(Client.phone.is_not(None)))
            exact = [c for c in result.scalars().all() if _digits(c.phone).endswith(digits[-10:])]

        if exact:
            return [self._row(c, 1.0, "exact") for c in exact[:max_results]]

        result = await self.db.execute(select(Client).limit(FUZZY_CANDIDATE_LIMIT))
        scored = [
            (name_similarity(query, client.client_name), client)
            for client in result.scalars().all()
        ]
        matches = sorted(
            (pair for pair in scored if pair[0] >= threshold),
            key=lambda pair: pair[0],
            reverse=True,
        )
        return [self._row(c, round(score, 4), "fuzzy") for score, c in matches[:max_results]]

    @staticmethod
    def _row(client: Client, similarity: float, match_type: str) -> Dict[str, Any]:
        return {
            "id": str(client.id),
            "client_name": client.client_name,
            "similarity": similarity,
            "match_type": match_type,
        }
