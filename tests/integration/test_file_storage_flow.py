"""
Integration tests for the upload, stage, chat and store flow.

Each scenario goes through the HTTP API: stage an upload, sync it into a
chat, let the assistant call the storage tool, then read the stored rows.
"""

import json
import re

import pytest
from fastapi import status
from httpx import AsyncClient

from app.main import app

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOCX_SIZE = 1_024_000


async def stage_docx(api: AsyncClient) -> dict:
    response = await api.post(
        "/api/files/upload",
        files={"file": ("document.docx", b"P" * DOCX_SIZE, DOCX_TYPE)},
    )
    assert response.status_code == status.HTTP_200_OK
    return response.json()["data"]


async def start_chat(api: AsyncClient) -> str:
    response = await api.post("/api/chat/message", json={"message": "Hi"})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]["conversation_id"]


def storage_tool_reply(client_name: str) -> str:
    return json.dumps(
        {
            "message": "I'll file that now.",
            "tool_calls": [{"name": "file_storage", "arguments": {"client_name": client_name}}],
        }
    )


class TestFileStorageFlow:
    """End-to-end scenarios for promoting a staged upload through chat."""

    @pytest.mark.asyncio
    async def test_upload_assigned_to_matching_client(
        self, authenticated_client: AsyncClient, mock_chat_model, sally, blob_store
    ):
        """Test a docx uploaded for an exactly matching client ends up assigned."""
        app.state.chat_model = mock_chat_model
        staged = await stage_docx(authenticated_client)
        assert staged["size"] == DOCX_SIZE

        chat_id = await start_chat(authenticated_client)
        synced = await authenticated_client.post(
            "/api/chat/file-context", json={"chatId": chat_id, "files": [staged]}
        )
        assert synced.json()["data"]["file_count"] == 1

        mock_chat_model.generate_content.return_value.text = storage_tool_reply("sally")
        response = await authenticated_client.post(
            "/api/chat/message",
            json={"conversationId": chat_id, "message": "Store it", "clientName": "sally"},
        )

        data = response.json()["data"]
        file_context = data["file_context"]
        assert len(file_context["stored_files"]) == 1
        assert file_context["stored_files"][0]["file_name"] == "document.docx"
        message = data["assistant_message"]["content"]
        assert "sally" in message
        assert "document.docx" in message
        assert not re.search("no files attached", message, re.IGNORECASE)

        stored = await authenticated_client.get("/api/files", params={"client_name": "sally"})
        row = stored.json()["data"]["files"][0]
        assert row["status"] == "assigned"
        assert row["id"] == staged["temp_id"]
        assert row["file_size"] == DOCX_SIZE
        assert len(blob_store.objects["uploads/document.docx"][0]) == DOCX_SIZE

    @pytest.mark.asyncio
    async def test_upload_queued_for_unknown_client(
        self, authenticated_client: AsyncClient, mock_chat_model, sally
    ):
        """Test an unmatched hint stores the file as temp_queue under the literal hint."""
        app.state.chat_model = mock_chat_model
        staged = await stage_docx(authenticated_client)

        mock_chat_model.generate_content.return_value.text = storage_tool_reply("zzz-no-such-client")
        response = await authenticated_client.post(
            "/api/chat/message",
            json={
                "message": "Store it",
                "clientName": "zzz-no-such-client",
                "files": [staged],
            },
        )

        file_context = response.json()["data"]["file_context"]
        assert file_context["client_name"] == "zzz-no-such-client"

        stored = await authenticated_client.get("/api/files", params={"status": "temp_queue"})
        row = stored.json()["data"]["files"][0]
        assert row["status"] == "temp_queue"
        assert row["client_name"] == "zzz-no-such-client"

    @pytest.mark.asyncio
    async def test_follow_up_sees_stored_files(
        self, authenticated_client: AsyncClient, mock_chat_model, sally
    ):
        """Test a later turn about the client is told the files already exist."""
        app.state.chat_model = mock_chat_model
        staged = await stage_docx(authenticated_client)
        await authenticated_client.post(
            "/api/files/store", json={"files": [staged], "clientName": "sally"}
        )

        mock_chat_model.generate_content.return_value.text = json.dumps(
            {"message": "Yes, it's on file.", "tool_calls": []}
        )
        response = await authenticated_client.post(
            "/api/chat/message", json={"message": "Did the docx get filed for sally?"}
        )

        file_context = response.json()["data"]["file_context"]
        assert file_context["source"] == "database"
        assert file_context["has_existing_files"] is True
        assert "document.docx" in file_context["message"]
        prompt = mock_chat_model.generate_content.call_args[0][0]
        assert '1 file(s) already stored for client "sally"' in prompt
