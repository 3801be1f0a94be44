"""Unit tests for the client registry service."""

import pytest

from app.domains.client.service import ClientService, name_similarity, normalize_name
from app.exceptions.files import ClientAlreadyExistsError, ClientNotFoundError
from app.schemas.client import ClientCreate
from app.shared.pagination import PaginationParams


class TestNameSimilarity:
    """Test cases for name scoring."""

    def test_normalize_name(self):
        assert normalize_name("  O'Brien,  Kathleen ") == "o brien kathleen"

    def test_identical_names(self):
        assert name_similarity("Sally Johnson", "sally johnson") == 1.0

    def test_prefix_bonus(self):
        # ratio 10/18 plus both the prefix and containment bonuses
        assert name_similarity("Sally", "Sally Johnson") == pytest.approx(10 / 18 + 0.15)

    def test_unrelated_names_score_low(self):
        assert name_similarity("zzz-no-such-client", "sally") < 0.3

    def test_empty_query(self):
        assert name_similarity("", "Sally") == 0.0


@pytest.mark.asyncio
class TestClientService:
    """Test cases for ClientService."""

    async def test_create_client(self, test_db):
        service = ClientService(test_db)
        client = await service.create_client(ClientCreate(client_name="  Marcus   Webb "))

        assert client.id is not None
        assert client.client_name == "Marcus Webb"

    async def test_create_duplicate_client(self, test_db, sally):
        service = ClientService(test_db)
        with pytest.raises(ClientAlreadyExistsError) as exc_info:
            await service.create_client(ClientCreate(client_name="SALLY"))
        assert exc_info.value.status_code == 409

    async def test_get_client_by_name_case_insensitive(self, test_db, sally):
        found = await ClientService(test_db).get_client_by_name("Sally")
        assert found.id == sally.id

    async def test_clients_list_search(self, test_db, make_client):
        await make_client(client_name="Sally Johnson")
        await make_client(client_name="Marcus Webb")

        result = await ClientService(test_db).get_clients_list(
            search="webb", pagination=PaginationParams(page=1, size=10)
        )

        assert result.total == 1
        assert result.items[0].client_name == "Marcus Webb"

    async def test_delete_missing_client(self, test_db):
        import uuid

        with pytest.raises(ClientNotFoundError):
            await ClientService(test_db).delete_client(uuid.uuid4())

    async def test_search_exact_name(self, test_db, sally):
        rows = await ClientService(test_db).search_clients_precise("SALLY")

        assert rows == [
            {"id": str(sally.id), "client_name": "sally", "similarity": 1.0, "match_type": "exact"}
        ]

    async def test_search_exact_email(self, test_db, sally):
        rows = await ClientService(test_db).search_clients_precise("Sally@Example.com")
        assert rows[0]["client_name"] == "sally"
        assert rows[0]["match_type"] == "exact"

    async def test_search_phone_any_format(self, test_db, sally):
        rows = await ClientService(test_db).search_clients_precise("(555) 010 2030")
        assert rows[0]["client_name"] == "sally"

    async def test_search_fuzzy_best_first(self, test_db, make_client):
        await make_client(client_name="Sally Johnson")
        await make_client(client_name="Sal Johnston")
        await make_client(client_name="Marcus Webb")

        rows = await ClientService(test_db).search_clients_precise(
            "Sally Jonson", similarity_threshold=0.6, max_results=5
        )

        assert [r["client_name"] for r in rows][0] == "Sally Johnson"
        assert "Marcus Webb" not in [r["client_name"] for r in rows]
        assert all(r["match_type"] == "fuzzy" for r in rows)

    async def test_search_threshold_excludes(self, test_db, make_client):
        await make_client(client_name="Sally Johnson")
        rows = await ClientService(test_db).search_clients_precise(
            "Sally", similarity_threshold=0.95
        )
        assert rows == []

    async def test_search_blank_query(self, test_db, sally):
        assert await ClientService(test_db).search_clients_precise("  ") == []
