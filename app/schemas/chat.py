"""Chat schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import ConfigDict, Field

from .base import BaseModelSchema, BaseSchema, CamelSchema
from .files import FileContextResult, FilePayload, FileReference


class MessageRole(str, Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatAction(BaseSchema):
    """Schema for a tool call executed on behalf of the assistant."""

    action_type: str = Field(..., description="Tool name, e.g. file_storage or add_communication")
    data: dict = Field(..., description="Tool arguments and result")
    success: bool = Field(default=True, description="Whether the tool call succeeded")
    error_message: str | None = Field(None, description="Error message if the tool call failed")


class ChatMessageResponse(BaseModelSchema):
    """Schema for chat message response."""

    conversation_id: UUID
    role: MessageRole
    content: str
    actions: list[ChatAction] | None = Field(None, description="Tool calls run for this message")
    has_actions: bool = Field(default=False)

    model_config = ConfigDict(from_attributes=True)


class ChatConversationResponse(BaseModelSchema):
    """Schema for chat conversation response."""

    user_id: UUID
    title: str | None
    summary: str | None
    client_name: str | None = None
    message_count: int = Field(default=0, description="Number of messages in conversation")

    model_config = ConfigDict(from_attributes=True)


class ChatConversationDetailResponse(ChatConversationResponse):
    """Schema for detailed chat conversation response with messages."""

    messages: list[ChatMessageResponse] = Field(default=[], description="Conversation messages")

    model_config = ConfigDict(from_attributes=True)


class ChatRequest(CamelSchema):
    """Schema for chat request."""

    conversation_id: UUID | None = Field(None, description="Existing conversation ID, null for new")
    message: str = Field(..., min_length=1, max_length=10000, description="User message")
    client_name: str | None = Field(None, max_length=255, description="Client the message is about")
    existing_files: list[FileReference] = Field(
        default=[], description="Files the web client already shows as stored"
    )
    files: list[FilePayload] | None = Field(
        None, description="Staged files attached directly to this message"
    )
    context: dict | None = Field(None, description="Additional context (current client, matter, etc.)")


class ChatResponse(BaseSchema):
    """Schema for chat response."""

    conversation_id: UUID
    user_message: ChatMessageResponse
    assistant_message: ChatMessageResponse
    actions_taken: list[ChatAction] = Field(default=[], description="Tool calls executed by assistant")
    file_context: FileContextResult | None = None
    timestamp: datetime


class ChatHistoryResponse(BaseSchema):
    """Schema for chat history response."""

    conversations: list[ChatConversationResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


# Update forward references if needed
ChatConversationDetailResponse.model_rebuild()
ChatResponse.model_rebuild()
