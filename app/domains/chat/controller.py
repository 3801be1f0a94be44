"""Chat API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query

from app.core.dependencies import (
    get_chat_service,
    get_current_user,
    get_file_context_store,
    validate_token,
)
from app.domains.chat.service import ChatService
from app.domains.files.context_store import FileContextStore
from app.schemas.base import ResponseSchema
from app.schemas.chat import ChatRequest
from app.schemas.files import FileContextSyncRequest, FileContextSyncResponse
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/chat",
    tags=["chat"],
    dependencies=[Depends(validate_token)],
)


@router.post("/file-context", response_model=ResponseSchema)
async def sync_file_context(
    sync_request: FileContextSyncRequest = Body(...),
    _current_user: User = Depends(get_current_user),
    context_store: FileContextStore = Depends(get_file_context_store),
):
    """Attach staged files to a chat so the storage tool can find them.

    Replaces whatever was synced for the chat before; an empty list clears it.
    """
    if sync_request.files:
        await context_store.set(
            str(sync_request.chat_id), sync_request.files, client_name=sync_request.client_name
        )
    else:
        await context_store.clear(str(sync_request.chat_id))

    return ResponseSchema(
        status="success",
        message=f"Synced {len(sync_request.files)} staged file(s)",
        data=FileContextSyncResponse(
            chat_id=sync_request.chat_id,
            file_count=len(sync_request.files),
            expires_in_seconds=context_store.ttl_seconds,
        ).model_dump(mode="json"),
    )


@router.post("/message", response_model=ResponseSchema, status_code=201)
async def send_chat_message(
    chat_request: ChatRequest = Body(...),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Send a message to the AI chat assistant.

    Args:
        chat_request: Chat request with message, client hint and file context
        current_user: Current authenticated user
        service: Chat service wired with the file context bridge

    Returns:
        Chat response with AI reply, tool calls run and the file status
    """
    result = await service.send_message(request=chat_request, user_id=current_user.id)

    return ResponseSchema(
        status="success",
        message="Message sent successfully",
        data=result.model_dump(mode="json"),
    )


@router.get("/conversations", response_model=ResponseSchema)
async def get_conversations(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Page size"),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Get all conversations for the current user."""
    result = await service.get_user_conversations(user_id=current_user.id, page=page, size=size)

    return ResponseSchema(
        status="success",
        message="Conversations retrieved successfully",
        data=result.model_dump(mode="json"),
    )


@router.get("/conversations/{conversation_id}", response_model=ResponseSchema)
async def get_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Get a specific conversation with all messages."""
    result = await service.get_conversation_history(
        conversation_id=conversation_id, user_id=current_user.id
    )

    return ResponseSchema(
        status="success",
        message="Conversation retrieved successfully",
        data=result.model_dump(mode="json"),
    )


@router.delete("/conversations/{conversation_id}", response_model=ResponseSchema)
async def delete_conversation(
    conversation_id: UUID = Path(..., description="Conversation ID"),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Delete a conversation and its messages."""
    await service.delete_conversation(conversation_id=conversation_id, user_id=current_user.id)

    return ResponseSchema(status="success", message="Conversation deleted successfully", data=None)
