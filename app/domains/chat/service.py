"""Chat service layer with AI assistant integration."""

import asyncio
import json
import logging
import re
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings, settings
from app.core.logging import log_event
from app.domains.client.records import ClientRecordsService
from app.domains.client.service import ClientService
from app.domains.files.bridge import FileContextBridge
from app.domains.files.resolver import ClientAssociationResolver
from app.exceptions.ai import (
    AIConfigurationError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AITimeoutError,
    map_ai_error,
)
from app.exceptions.base import BaseAppException, NotFoundError, ValidationError
from app.schemas.chat import (
    ChatAction,
    ChatConversationDetailResponse,
    ChatConversationResponse,
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
)
from app.schemas.client import (
    ClientCreate,
    ClientProfileResponse,
    ClientResponse,
    CommunicationCreate,
    FinancialTransactionCreate,
)
from app.schemas.files import FileContextResult
from app.shared.pagination import PaginationParams, paginate
from models.chat_conversation import ChatConversation
from models.chat_message import ChatMessage, MessageRole
from models.client import ClientType
from models.communication import CommunicationDirection, CommunicationPriority, CommunicationType
from models.financial_transaction import TransactionType

logger = logging.getLogger(__name__)

FILE_STORAGE_TOOL = {
    "name": "file_storage",
    "description": (
        "COMPLETES the file storage process for uploaded files. Call it when files have been "
        "uploaded and need to be permanently stored. After it succeeds no further storage "
        "action is needed. Do not ask for files that have already been stored."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "client_name": {
                "type": "string",
                "description": "Name of the client to associate the files with",
            },
        },
    },
}

LOOKUP_CLIENT_TOOL = {
    "name": "lookup_client",
    "description": "Find the registered client that best matches a name, email or phone number.",
    "parameters": {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Client name, email or phone"},
        },
        "required": ["query"],
    },
}

CREATE_CLIENT_TOOL = {
    "name": "create_client",
    "description": "Register a new client. Fails if a client with the same name already exists.",
    "parameters": {
        "type": "object",
        "properties": {
            "client_name": {"type": "string", "description": "Full name of the client"},
            "client_type": {"type": "string", "enum": [t.value for t in ClientType]},
            "email": {"type": "string"},
            "phone": {"type": "string"},
            "address": {"type": "string"},
            "notes": {"type": "string"},
            "date_intake": {"type": "string", "description": "Intake date, YYYY-MM-DD"},
        },
        "required": ["client_name"],
    },
}

GET_CLIENT_PROFILE_TOOL = {
    "name": "get_client_profile",
    "description": "Show registered clients whose name, email or phone contains the search text.",
    "parameters": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Client name or keyword"},
            "limit": {"type": "integer", "description": "Maximum profiles to return (default 10)"},
        },
        "required": ["name"],
    },
}

ADD_FINANCIAL_TRANSACTION_TOOL = {
    "name": "add_financial_transaction",
    "description": (
        "Add a quote, payment or adjustment to a client's account. Payments need a payment "
        "method. Reports the client's remaining balance."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "client_name": {"type": "string"},
            "transaction_type": {"type": "string", "enum": [t.value for t in TransactionType]},
            "amount": {"type": "number", "description": "Positive amount in dollars"},
            "payment_method": {"type": "string", "description": "Required for payments"},
            "case_number": {"type": "string"},
            "service_description": {"type": "string"},
            "notes": {"type": "string"},
            "transaction_date": {"type": "string", "description": "YYYY-MM-DD, defaults to today"},
        },
        "required": ["client_name", "transaction_type", "amount"],
    },
}

ADD_COMMUNICATION_TOOL = {
    "name": "add_communication",
    "description": "Log a call, email, meeting or other contact with a client.",
    "parameters": {
        "type": "object",
        "properties": {
            "client_name": {"type": "string"},
            "communication_type": {"type": "string", "enum": [t.value for t in CommunicationType]},
            "direction": {"type": "string", "enum": [d.value for d in CommunicationDirection]},
            "priority": {"type": "string", "enum": [p.value for p in CommunicationPriority]},
            "subject": {"type": "string"},
            "notes": {"type": "string", "description": "What was discussed"},
            "follow_up_required": {"type": "boolean"},
            "follow_up_date": {"type": "string", "description": "YYYY-MM-DD, required with a follow-up"},
            "follow_up_notes": {"type": "string"},
            "related_case_number": {"type": "string"},
            "court_date": {"type": "string", "description": "YYYY-MM-DD"},
            "duration_minutes": {"type": "integer"},
            "outcome": {"type": "string"},
            "next_action": {"type": "string"},
        },
        "required": ["client_name", "communication_type", "direction", "notes"],
    },
}

CHAT_TOOLS = [
    FILE_STORAGE_TOOL,
    LOOKUP_CLIENT_TOOL,
    CREATE_CLIENT_TOOL,
    GET_CLIENT_PROFILE_TOOL,
    ADD_FINANCIAL_TRANSACTION_TOOL,
    ADD_COMMUNICATION_TOOL,
]

PROFILE_LIMIT_MAX = 50

_FOR_CLIENT_PATTERN = re.compile(r"\bfor\s+client\s+[\"'“]?([^\"'”.,;!?\n]+)", re.IGNORECASE)
_QUOTED_PATTERN = re.compile(r"[\"“]([^\"”]+)[\"”]|'([^']+)'")
_FOR_PATTERN = re.compile(r"\bfor\s+[\"'“]?([^\"'”.,;!?\n]+)", re.IGNORECASE)
_CLIENT_CONTEXT_PATTERN = re.compile(r"\b(?:for|client|with|to)\s+[A-Z]")
_CAPITALIZED_NAME_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")

_STOP_WORDS = {
    "please", "now", "today", "asap", "thanks", "thank", "and", "with", "in", "on", "under",
    "as", "so", "because", "right",
}
_GENERIC_TARGETS = {
    "this", "that", "it", "them", "me", "us", "him", "her", "the", "a", "an", "my", "our",
    "file", "files", "document", "documents", "storage", "later", "now", "review", "me please",
}
_LEADING_ARTICLES = {"the", "client", "my", "our"}


def _clean_name(raw: str) -> str | None:
    words = raw.strip().split()
    kept: list[str] = []
    for word in words:
        if word.lower() in _STOP_WORDS:
            break
        kept.append(word)
    while kept and kept[0].lower() in _LEADING_ARTICLES:
        kept.pop(0)
    name = " ".join(kept[:4]).strip()
    if not name or name.lower() in _GENERIC_TARGETS:
        return None
    return name


def extract_client_name(message: str | None) -> str | None:
    """Pull a client name out of a chat message, if the user gave one.

    Looks for ``for client X``, then a quoted name, then ``for X``, then a
    capitalized name when the message addresses a client.
    """
    if not message or not isinstance(message, str):
        return None

    match = _FOR_CLIENT_PATTERN.search(message)
    if match and (name := _clean_name(match.group(1))):
        return name

    match = _QUOTED_PATTERN.search(message)
    if match:
        quoted = (match.group(1) or match.group(2) or "").strip()
        if quoted:
            return quoted

    for match in _FOR_PATTERN.finditer(message):
        name = _clean_name(match.group(1))
        if name:
            return name

    if _CLIENT_CONTEXT_PATTERN.search(message):
        # Skip the sentence-initial word, it is capitalized regardless
        for match in _CAPITALIZED_NAME_PATTERN.finditer(message):
            if match.start() == 0 or len(match.group(1)) <= 2:
                continue
            return match.group(1).strip()

    return None


def build_chat_model(config: Settings):
    """Configure Gemini and build the chat model, or None without an API key."""
    if not config.gemini_api_key:
        logger.warning("Gemini API key not configured; chat assistant disabled")
        return None

    try:
        genai.configure(api_key=config.gemini_api_key)
        model = genai.GenerativeModel(
            model_name=config.gemini_model,
            safety_settings={
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            },
            generation_config=genai.types.GenerationConfig(
                candidate_count=1,
                max_output_tokens=config.gemini_max_tokens,
                temperature=0.4,
            ),
        )
        logger.info(f"Chat Gemini client initialized with model: {config.gemini_model}")
        return model
    except Exception as e:
        logger.error(f"Failed to initialize Gemini client: {str(e)}")
        raise AIConfigurationError(f"Failed to initialize AI service: {str(e)}") from e


class ChatService:
    """Service class for AI chat operations using Google Gemini."""

    def __init__(
        self,
        db: AsyncSession,
        model: Any,
        bridge: FileContextBridge,
        resolver: ClientAssociationResolver,
    ):
        """Initialize chat service.

        Args:
            db: Async database session for data operations.
            model: Gemini ``GenerativeModel`` built at startup, or None when unconfigured.
            bridge: File context bridge for the ``file_storage`` tool.
            resolver: Client resolver for the ``lookup_client`` tool.
        """
        self.db = db
        self.model = model
        self.bridge = bridge
        self.resolver = resolver
        self.clients = ClientService(db)
        self.records = ClientRecordsService(db)
        self._record_tools = {
            "create_client": self._create_client,
            "get_client_profile": self._get_client_profile,
            "add_financial_transaction": self._add_financial_transaction,
            "add_communication": self._add_communication,
        }

    async def send_message(self, request: ChatRequest, user_id: UUID) -> ChatResponse:
        """Send a message and get AI response, running any tool calls.

        Args:
            request: Chat request with message and file context
            user_id: User ID sending the message

        Returns:
            ChatResponse with user message, AI response and the tool calls executed
        """
        if not self.model:
            raise AIConfigurationError("AI service not configured: set GEMINI_API_KEY")

        conversation = await self._get_or_create_conversation(request.conversation_id, user_id)
        conversation_id = conversation.id
        client_hint = (
            request.client_name
            or extract_client_name(request.message)
            or conversation.client_name
        )

        user_message = ChatMessage(
            conversation_id=conversation_id,
            role=MessageRole.USER,
            content=request.message,
        )
        self.db.add(user_message)
        if not conversation.title:
            conversation.title = self._generate_conversation_title(request.message)
        # Committed up front so per-file rollbacks in the storage tool cannot drop it
        await self.db.commit()

        try:
            file_status = await self.bridge.describe(
                chat_id=conversation_id,
                client_name=client_hint,
                existing_files=request.existing_files,
                files=request.files,
                persist=False,
            )

            history = await self._get_conversation_history(conversation_id)
            prompt = self._build_chat_prompt(request.message, history, file_status, request.context)

            response_text = await asyncio.wait_for(
                self._generate_content_with_retry(prompt), timeout=settings.ai_request_timeout
            )
            parsed_response = self._parse_chat_response(response_text)

            actions_taken: list[ChatAction] = []
            file_result: FileContextResult | None = None
            tool_messages: list[str] = []
            for call in parsed_response["tool_calls"]:
                name = call.get("name")
                arguments = call.get("arguments") or {}
                if name == "file_storage":
                    if file_result is not None:
                        continue
                    file_result = await self.bridge.describe(
                        chat_id=conversation_id,
                        client_name=arguments.get("client_name") or client_hint,
                        existing_files=request.existing_files,
                        files=request.files,
                        persist=True,
                        uploaded_by=user_id,
                    )
                    actions_taken.append(
                        ChatAction(
                            action_type="file_storage",
                            data={"arguments": arguments, "result": file_result.model_dump(mode="json")},
                            success=file_result.success,
                            error_message=None if file_result.success else file_result.message,
                        )
                    )
                elif name == "lookup_client":
                    actions_taken.append(await self._lookup_client(arguments, client_hint))
                elif name in self._record_tools:
                    action = await self._run_record_tool(name, arguments)
                    actions_taken.append(action)
                    tool_messages.append(
                        action.data.get("message") if action.success else action.error_message
                    )
                else:
                    actions_taken.append(
                        ChatAction(
                            action_type=str(name),
                            data={"arguments": arguments},
                            success=False,
                            error_message=f"Unknown tool: {name}",
                        )
                    )

            # The storage outcome is the only account of file state the user sees
            if file_result:
                content = file_result.message
            else:
                content = "\n\n".join(m for m in [parsed_response["message"], *tool_messages] if m)

            await self.db.refresh(conversation)
            resolved_client = (file_result.client_name if file_result else None) or client_hint
            if resolved_client:
                conversation.client_name = resolved_client

            assistant_message = ChatMessage(
                conversation_id=conversation_id,
                role=MessageRole.ASSISTANT,
                content=content,
                actions=[action.model_dump(mode="json") for action in actions_taken] or None,
                has_actions=len(actions_taken) > 0,
            )
            self.db.add(assistant_message)
            await self.db.commit()
            await self.db.refresh(user_message)
            await self.db.refresh(assistant_message)

            log_event(
                logger, "chat_turn", "ok",
                conversation_id=str(conversation_id), tool_calls=len(actions_taken),
            )
            return ChatResponse(
                conversation_id=conversation_id,
                user_message=ChatMessageResponse.model_validate(user_message),
                assistant_message=ChatMessageResponse.model_validate(assistant_message),
                actions_taken=actions_taken,
                file_context=file_result or file_status,
                timestamp=datetime.now(UTC),
            )

        except TimeoutError:
            await self.db.rollback()
            raise AITimeoutError("Chat request timed out") from None
        except BaseAppException:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Chat service error: {str(e)}")
            raise AIServiceError(f"Chat service error: {str(e)}") from e

    async def get_conversation_history(self, conversation_id: UUID, user_id: UUID) -> ChatConversationDetailResponse:
        """Get conversation with all messages.

        Args:
            conversation_id: Conversation ID
            user_id: User ID for authorization

        Returns:
            Conversation with messages
        """
        conversation = await self._get_user_conversation(conversation_id, user_id)

        messages_query = (
            select(ChatMessage).where(ChatMessage.conversation_id == conversation_id).order_by(ChatMessage.created_at)
        )
        messages_result = await self.db.execute(messages_query)
        messages = messages_result.scalars().all()

        return ChatConversationDetailResponse(
            id=conversation.id,
            user_id=conversation.user_id,
            title=conversation.title,
            summary=conversation.summary,
            client_name=conversation.client_name,
            message_count=len(messages),
            messages=[ChatMessageResponse.model_validate(msg) for msg in messages],
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )

    async def get_user_conversations(self, user_id: UUID, page: int = 1, size: int = 20) -> ChatHistoryResponse:
        """Get all conversations for a user.

        Args:
            user_id: User ID
            page: Page number
            size: Page size

        Returns:
            List of conversations with pagination
        """
        query = (
            select(ChatConversation)
            .where(ChatConversation.user_id == user_id)
            .order_by(ChatConversation.updated_at.desc())
        )
        result = await paginate(self.db, query, PaginationParams(page=page, size=size))

        conversation_responses = []
        for conv in result.items:
            msg_count_query = select(func.count(ChatMessage.id)).where(ChatMessage.conversation_id == conv.id)
            msg_count_result = await self.db.execute(msg_count_query)
            msg_count = msg_count_result.scalar() or 0

            conversation_responses.append(
                ChatConversationResponse(
                    id=conv.id,
                    user_id=conv.user_id,
                    title=conv.title,
                    summary=conv.summary,
                    client_name=conv.client_name,
                    message_count=msg_count,
                    created_at=conv.created_at,
                    updated_at=conv.updated_at,
                )
            )

        return ChatHistoryResponse(
            conversations=conversation_responses,
            total=result.total,
            page=result.page,
            size=result.size,
            has_next=result.has_next,
            has_prev=result.has_prev,
        )

    async def delete_conversation(self, conversation_id: UUID, user_id: UUID) -> bool:
        """Delete a conversation and its messages."""
        conversation = await self._get_user_conversation(conversation_id, user_id)
        await self.db.delete(conversation)
        await self.db.commit()
        return True

    # Private helper methods

    async def _get_user_conversation(self, conversation_id: UUID, user_id: UUID) -> ChatConversation:
        query = select(ChatConversation).where(
            ChatConversation.id == conversation_id, ChatConversation.user_id == user_id
        )
        result = await self.db.execute(query)
        conversation = result.scalar_one_or_none()
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    async def _get_or_create_conversation(self, conversation_id: UUID | None, user_id: UUID) -> ChatConversation:
        """Get existing conversation or create new one."""
        if conversation_id:
            return await self._get_user_conversation(conversation_id, user_id)

        conversation = ChatConversation(user_id=user_id)
        self.db.add(conversation)
        await self.db.flush()
        return conversation

    async def _get_conversation_history(self, conversation_id: UUID) -> list[dict]:
        """Get conversation message history."""
        query = (
            select(ChatMessage).where(ChatMessage.conversation_id == conversation_id).order_by(ChatMessage.created_at)
        )
        result = await self.db.execute(query)
        messages = result.scalars().all()

        return [{"role": msg.role.value, "content": msg.content} for msg in messages]

    def _build_chat_prompt(
        self,
        message: str,
        history: list[dict],
        file_status: FileContextResult,
        context: dict | None,
    ) -> str:
        """Build chat prompt with tools, file status and history."""
        system_prompt = f"""You are an assistant for a law firm's case team. You help staff find and register clients,
file documents uploaded in the chat against the right client, and keep each client's account
and communication log up to date.

Tools you can call:
{json.dumps(CHAT_TOOLS, indent=2)}

Rules for files:
- The FILE STATUS section below is the ground truth about files in this conversation.
- Never say that no files are attached when FILE STATUS lists files.
- If FILE STATUS lists files ready to store and the user wants them stored, call file_storage.
- Never ask the user to upload a file that FILE STATUS reports as already stored.

Response Format:
Always respond in JSON format with this structure:
```json
{{
    "message": "Your conversational response to the user",
    "tool_calls": [
        {{"name": "file_storage", "arguments": {{"client_name": "Client Name"}}}}
    ]
}}
```
Use an empty "tool_calls" list when no tool is needed.

FILE STATUS:
{file_status.message}
"""

        if context:
            system_prompt += f"\nCurrent Context:\n{json.dumps(context, indent=2, default=str)}\n"

        conversation = system_prompt + "\nConversation:\n"
        for msg in history[-settings.chat_history_limit:]:
            conversation += f"{msg['role'].upper()}: {msg['content']}\n"

        # History already ends with the stored user message
        if not history or history[-1]["content"] != message:
            conversation += f"USER: {message}\n"
        conversation += "ASSISTANT:"

        return conversation

    @retry(
        retry=retry_if_exception_type((AIRateLimitError, AIQuotaExceededError)),
        stop=stop_after_attempt(settings.ai_max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.ai_retry_backoff_factor,
            min=settings.ai_retry_min_wait,
            max=settings.ai_retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _generate_content_with_retry(self, prompt: str) -> str:
        """Generate content with exponential backoff on rate limit and quota errors."""
        return await self._generate_content_async(prompt)

    async def _generate_content_async(self, prompt: str) -> str:
        """Generate content using Gemini API asynchronously."""
        try:
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, lambda: self.model.generate_content(prompt))

            if not response or not response.text:
                raise AIServiceError("Empty response from AI service")

            return response.text

        except AIServiceError:
            raise
        except Exception as e:
            logger.error(f"Gemini API call failed: {str(e)}")
            raise map_ai_error(str(e)) from e

    def _parse_chat_response(self, response: str) -> dict[str, Any]:
        """Parse AI chat response into a message and tool calls."""
        try:
            json_start = response.find("{")
            json_end = response.rfind("}") + 1

            if json_start == -1 or json_end == 0:
                return {"message": response, "tool_calls": []}

            data = json.loads(response[json_start:json_end])
            tool_calls = data.get("tool_calls") or []
            if not isinstance(tool_calls, list):
                tool_calls = []

            return {
                "message": data.get("message", response),
                "tool_calls": [call for call in tool_calls if isinstance(call, dict)],
            }

        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse chat JSON, using raw response: {str(e)}")
            return {"message": response, "tool_calls": []}

    async def _lookup_client(self, arguments: dict, client_hint: str | None) -> ChatAction:
        query = arguments.get("query") or client_hint
        if not query:
            return ChatAction(
                action_type="lookup_client",
                data={"arguments": arguments},
                success=False,
                error_message="No client name given",
            )
        association = await self.resolver.resolve(query)
        return ChatAction(
            action_type="lookup_client",
            data={"arguments": arguments, "result": association.model_dump()},
            success=association.matched,
            error_message=None if association.matched else f'No registered client matches "{query}"',
        )

    async def _run_record_tool(self, name: str, arguments: dict) -> ChatAction:
        """Run a registry or records tool; its errors fail the action, not the turn."""
        try:
            result = await self._record_tools[name](arguments)
        except PydanticValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            return ChatAction(
                action_type=name,
                data={"arguments": arguments},
                success=False,
                error_message=f"Invalid {name} arguments: {reasons}",
            )
        except BaseAppException as e:
            log_event(logger, "chat_tool", "failed", level=logging.WARNING, tool=name, error=e.message)
            return ChatAction(
                action_type=name, data={"arguments": arguments}, success=False, error_message=e.message
            )
        return ChatAction(action_type=name, data={"arguments": arguments, **result})

    async def _create_client(self, arguments: dict) -> dict:
        client = await self.clients.create_client(ClientCreate.model_validate(arguments))
        return {
            "message": f'Registered client "{client.client_name}".',
            "result": ClientResponse.model_validate(client).model_dump(mode="json"),
        }

    async def _get_client_profile(self, arguments: dict) -> dict:
        query = (arguments.get("name") or "").strip()
        if not query:
            raise ValidationError("Client name or keyword is required to search profiles")
        try:
            limit = int(arguments.get("limit") or 10)
        except (TypeError, ValueError):
            limit = 10
        limit = max(1, min(limit, PROFILE_LIMIT_MAX))

        page = await self.clients.get_clients_list(
            search=query, pagination=PaginationParams(page=1, size=limit)
        )
        profile = ClientProfileResponse(
            query=query,
            result_count=len(page.items),
            clients=[ClientResponse.model_validate(c) for c in page.items],
        )
        names = ", ".join(c.client_name for c in profile.clients)
        return {
            "message": f'Found {profile.result_count} client(s) matching "{query}"'
            + (f": {names}." if names else "."),
            "result": profile.model_dump(mode="json"),
        }

    async def _add_financial_transaction(self, arguments: dict) -> dict:
        result = await self.records.add_financial_transaction(
            FinancialTransactionCreate.model_validate(arguments)
        )
        return {"message": result.message, "result": result.model_dump(mode="json")}

    async def _add_communication(self, arguments: dict) -> dict:
        result = await self.records.add_communication(CommunicationCreate.model_validate(arguments))
        return {"message": result.message, "result": result.model_dump(mode="json")}

    def _generate_conversation_title(self, first_message: str) -> str:
        """Generate conversation title from first message."""
        title = first_message[:50]
        if len(first_message) > 50:
            title += "..."
        return title
