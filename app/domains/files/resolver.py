"""Client association resolver.

Best-effort matching of a free-text client hint against the registry. The
lookup backend may answer with a list, a ``{"data": ...}`` wrapper, a bare
row or something else entirely; ``normalize_lookup_response`` turns that
into one of three variants at the boundary so the resolver only ever
matches on a known shape.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from app.core.config import settings
from app.core.logging import log_event
from app.schemas.files import ClientAssociationResult
from models.stored_file import UNASSIGNED_CLIENT

logger = logging.getLogger(__name__)

LookupFn = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class NoMatch:
    """The backend answered and found nothing."""


@dataclass(frozen=True)
class SingleMatch:
    """The backend returned a usable row."""

    client_name: str
    similarity: float | None = None


@dataclass(frozen=True)
class UnexpectedShape:
    """The backend answered with something that is not a client row."""

    raw: Any


LookupResponse = NoMatch | SingleMatch | UnexpectedShape


def normalize_lookup_response(response: Any) -> LookupResponse:
    """Reduce a raw client lookup response to a single variant."""
    if response is None:
        return NoMatch()

    if isinstance(response, Mapping) and "data" in response:
        if response.get("error"):
            return UnexpectedShape(response)
        response = response["data"]
        if response is None:
            return NoMatch()

    if isinstance(response, Mapping):
        rows = [response]
    elif isinstance(response, (list, tuple)):
        rows = list(response)
    else:
        return UnexpectedShape(response)

    if not rows:
        return NoMatch()

    first = rows[0]
    if not isinstance(first, Mapping):
        return UnexpectedShape(response)

    name = first.get("client_name") or first.get("name")
    if not isinstance(name, str) or not name.strip():
        return UnexpectedShape(response)

    similarity = first.get("similarity")
    return SingleMatch(
        client_name=name.strip(),
        similarity=float(similarity) if isinstance(similarity, (int, float)) else None,
    )


class ClientAssociationResolver:
    """Match a client hint to a canonical registry name."""

    def __init__(self, lookup: LookupFn, similarity_threshold: float | None = None):
        """
        Args:
            lookup: Async search callable with the signature of
                ``ClientService.search_clients_precise``.
            similarity_threshold: Fuzzy-match cut-off, defaults to settings.
        """
        self.lookup = lookup
        self.similarity_threshold = (
            settings.client_match_threshold if similarity_threshold is None else similarity_threshold
        )

    async def resolve(self, hint: str | None) -> ClientAssociationResult:
        """Resolve ``hint`` to a registry client.

        Never raises: a failing or malformed lookup degrades to the raw hint.
        A blank hint skips the lookup and yields ``"Unassigned"``.
        """
        hint = (hint or "").strip()
        if not hint:
            return ClientAssociationResult(client_name=UNASSIGNED_CLIENT, matched=False)

        try:
            response = await self.lookup(
                search_query=hint,
                similarity_threshold=self.similarity_threshold,
                max_results=1,
            )
        except Exception as e:
            log_event(
                logger, "resolve_client", "degraded", level=logging.WARNING,
                client_hint=hint, error=str(e),
            )
            return ClientAssociationResult(client_name=hint, matched=False, degraded=True)

        outcome = normalize_lookup_response(response)
        if isinstance(outcome, SingleMatch):
            log_event(
                logger, "resolve_client", "matched",
                client_hint=hint, client_name=outcome.client_name, similarity=outcome.similarity,
            )
            return ClientAssociationResult(client_name=outcome.client_name, matched=True)

        if isinstance(outcome, NoMatch):
            log_event(logger, "resolve_client", "no_match", client_hint=hint)
            return ClientAssociationResult(client_name=hint, matched=False)

        log_event(
            logger, "resolve_client", "degraded", level=logging.WARNING,
            client_hint=hint, response_type=type(outcome.raw).__name__,
        )
        return ClientAssociationResult(client_name=hint, matched=False, degraded=True)
