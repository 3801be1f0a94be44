"""
Chat message model for AI assistant messages.
"""

import enum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel, JSONType


class MessageRole(str, enum.Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """
    Represents a chat message entity in the application.
    """

    __tablename__ = "chat_messages"

    conversation_id = Column(UUID(), ForeignKey("chat_conversations.id"), nullable=False)
    role = Column(Enum(MessageRole), nullable=False)
    content = Column(Text, nullable=False)

    # Tool calls executed for this message, e.g. {"action_type": "file_storage", "data": {...}}
    actions = Column(JSONType, nullable=True)

    # Whether this message led to tool execution
    has_actions = Column(Boolean, default=False)

    # Relationships
    conversation = relationship("ChatConversation", back_populates="messages")
