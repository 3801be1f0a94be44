"""Unit tests for client association resolution."""

from unittest.mock import AsyncMock

import pytest

from app.domains.files.resolver import (
    ClientAssociationResolver,
    NoMatch,
    SingleMatch,
    UnexpectedShape,
    normalize_lookup_response,
)
from models.stored_file import UNASSIGNED_CLIENT


class TestNormalizeLookupResponse:
    """Test cases for lookup response normalization."""

    @pytest.mark.parametrize("response", [None, [], (), {"data": None}, {"data": []}])
    def test_no_match_shapes(self, response):
        assert normalize_lookup_response(response) == NoMatch()

    def test_list_of_rows(self):
        response = [
            {"client_name": "Sally Johnson", "similarity": 0.82},
            {"client_name": "Sal Jones", "similarity": 0.61},
        ]
        assert normalize_lookup_response(response) == SingleMatch("Sally Johnson", 0.82)

    def test_bare_row(self):
        assert normalize_lookup_response({"name": " Marcus Webb "}) == SingleMatch("Marcus Webb")

    def test_data_wrapper(self):
        response = {"data": [{"client_name": "Marcus Webb", "similarity": 1}]}
        assert normalize_lookup_response(response) == SingleMatch("Marcus Webb", 1.0)

    def test_data_wrapper_with_error(self):
        response = {"data": None, "error": {"message": "permission denied"}}
        assert isinstance(normalize_lookup_response(response), UnexpectedShape)

    @pytest.mark.parametrize(
        "response",
        ["Sally Johnson", 42, [["Sally Johnson"]], [{"id": "abc"}], [{"client_name": "  "}]],
    )
    def test_unexpected_shapes(self, response):
        outcome = normalize_lookup_response(response)
        assert isinstance(outcome, UnexpectedShape)
        assert outcome.raw == response


@pytest.mark.asyncio
class TestClientAssociationResolver:
    """Test cases for ClientAssociationResolver."""

    async def test_blank_hint_skips_lookup(self):
        lookup = AsyncMock()
        result = await ClientAssociationResolver(lookup).resolve("   ")

        assert result.client_name == UNASSIGNED_CLIENT
        assert result.matched is False
        lookup.assert_not_awaited()

    async def test_match_uses_registry_name(self):
        lookup = AsyncMock(return_value=[{"client_name": "Sally Johnson", "similarity": 0.7}])
        result = await ClientAssociationResolver(lookup, similarity_threshold=0.5).resolve("sally")

        assert result.client_name == "Sally Johnson"
        assert result.matched is True
        lookup.assert_awaited_once_with(search_query="sally", similarity_threshold=0.5, max_results=1)

    async def test_no_match_keeps_hint(self):
        lookup = AsyncMock(return_value=[])
        result = await ClientAssociationResolver(lookup).resolve("zzz-no-such-client")

        assert result.client_name == "zzz-no-such-client"
        assert result.matched is False
        assert result.degraded is False

    async def test_lookup_error_degrades(self):
        lookup = AsyncMock(side_effect=ConnectionError("registry down"))
        result = await ClientAssociationResolver(lookup).resolve("Marcus Webb")

        assert result.client_name == "Marcus Webb"
        assert result.matched is False
        assert result.degraded is True

    async def test_unexpected_shape_degrades(self):
        lookup = AsyncMock(return_value="Marcus Webb")
        result = await ClientAssociationResolver(lookup).resolve("Marcus")

        assert result.client_name == "Marcus"
        assert result.degraded is True
