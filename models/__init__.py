"""
Models package initialization.
"""

from .base import Base, BaseModel
from .chat_conversation import ChatConversation
from .chat_message import ChatMessage, MessageRole
from .client import Client, ClientType
from .communication import (
    Communication,
    CommunicationDirection,
    CommunicationPriority,
    CommunicationType,
)
from .financial_transaction import FinancialTransaction, TransactionType
from .stored_file import UNASSIGNED_CLIENT, FileStatus, StoredFile
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Client",
    "ClientType",
    "StoredFile",
    "FileStatus",
    "UNASSIGNED_CLIENT",
    # Client records
    "FinancialTransaction",
    "TransactionType",
    "Communication",
    "CommunicationType",
    "CommunicationDirection",
    "CommunicationPriority",
    # Chat models
    "ChatConversation",
    "ChatMessage",
    "MessageRole",
]
