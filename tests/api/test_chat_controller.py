"""
API tests for the chat controller and application endpoints.
"""

import json
import uuid

import pytest
from fastapi import status
from httpx import AsyncClient

from app.main import app


class TestChatController:
    """Test cases for chat API endpoints."""

    @pytest.mark.asyncio
    async def test_sync_file_context(
        self, authenticated_client: AsyncClient, file_context_store, staged_file
    ):
        """Test staged files are attached to a chat."""
        chat_id = str(uuid.uuid4())
        staged = staged_file(filename="police_report.pdf").model_dump()

        response = await authenticated_client.post(
            "/api/chat/file-context",
            json={"chatId": chat_id, "files": [staged], "clientName": "sally"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["file_count"] == 1
        assert data["expires_in_seconds"] == 300
        entry = await file_context_store.get(chat_id)
        assert [f.filename for f in entry.files] == ["police_report.pdf"]
        assert entry.client_name == "sally"

    @pytest.mark.asyncio
    async def test_sync_empty_list_clears(
        self, authenticated_client: AsyncClient, file_context_store, staged_file
    ):
        chat_id = str(uuid.uuid4())
        await file_context_store.set(chat_id, [staged_file()])

        await authenticated_client.post("/api/chat/file-context", json={"chatId": chat_id, "files": []})

        assert await file_context_store.get(chat_id) is None

    @pytest.mark.asyncio
    async def test_sync_rejects_incomplete_files(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/chat/file-context",
            json={"chatId": str(uuid.uuid4()), "files": [{"filename": "x.pdf"}]},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_send_message(self, authenticated_client: AsyncClient, mock_chat_model):
        app.state.chat_model = mock_chat_model

        response = await authenticated_client.post("/api/chat/message", json={"message": "Hello"})

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["assistant_message"]["content"] == "Hello!"
        assert data["file_context"]["success"] is False

    @pytest.mark.asyncio
    async def test_send_message_stores_files(
        self, authenticated_client: AsyncClient, mock_chat_model, sally, staged_file, blob_store
    ):
        app.state.chat_model = mock_chat_model
        mock_chat_model.generate_content.return_value.text = json.dumps(
            {"message": "Storing.", "tool_calls": [{"name": "file_storage", "arguments": {}}]}
        )

        response = await authenticated_client.post(
            "/api/chat/message",
            json={
                "message": "Store this for sally",
                "files": [staged_file(filename="intake_form.pdf").model_dump()],
            },
        )

        data = response.json()["data"]
        assert data["file_context"]["has_existing_files"] is True
        assert "intake_form.pdf" in data["assistant_message"]["content"]
        assert "uploads/intake_form.pdf" in blob_store.objects

    @pytest.mark.asyncio
    async def test_send_message_without_model(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/chat/message", json={"message": "Hello"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["error_code"] == "AI_CONFIGURATION_ERROR"

    @pytest.mark.asyncio
    async def test_send_empty_message(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/chat/message", json={"message": ""})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_conversations(self, authenticated_client: AsyncClient, mock_chat_model):
        app.state.chat_model = mock_chat_model
        sent = await authenticated_client.post("/api/chat/message", json={"message": "Hello"})
        conversation_id = sent.json()["data"]["conversation_id"]

        listing = await authenticated_client.get("/api/chat/conversations")
        assert listing.json()["data"]["total"] == 1

        detail = await authenticated_client.get(f"/api/chat/conversations/{conversation_id}")
        assert len(detail.json()["data"]["messages"]) == 2

        deleted = await authenticated_client.delete(f"/api/chat/conversations/{conversation_id}")
        assert deleted.status_code == status.HTTP_200_OK

        missing = await authenticated_client.get(f"/api/chat/conversations/{conversation_id}")
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_chat_requires_token(self, client: AsyncClient):
        response = await client.post("/api/chat/message", json={"message": "Hello"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestAppEndpoints:
    """Test cases for root, health and middleware."""

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.json()["name"] == "Case Assistant API"

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert body["services"]["database"] == "healthy"
        assert body["services"]["file_storage"] == "not_configured"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Request-ID": "req-abc"})
        assert response.headers["X-Request-ID"] == "req-abc"

    @pytest.mark.asyncio
    async def test_error_carries_request_id(self, client: AsyncClient):
        response = await client.get("/api/files", headers={"X-Request-ID": "req-401"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["request_id"] == "req-401"
