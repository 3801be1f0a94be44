"""Per-chat cache of staged files.

The web client syncs the files it has staged for a conversation here so the
file storage tool can find them server-side. Entries expire after a short
TTL and are cleared once their files are promoted.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from app.core.config import settings
from app.schemas.files import StagedFile

logger = logging.getLogger(__name__)


@dataclass
class ChatFileContext:
    """Staged files and client hint synced for one chat."""

    files: list[StagedFile]
    client_name: str | None = None
    expires_at: float = field(default=0.0)


class FileContextStore:
    """In-process, TTL-bounded map of chat id to staged files."""

    def __init__(self, ttl_seconds: int | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.file_context_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[str, ChatFileContext] = {}

    async def set(self, chat_id: str, files: list[StagedFile], client_name: str | None = None) -> None:
        """Replace the staged files for a chat and restart its TTL."""
        self._purge_expired()
        self._entries[str(chat_id)] = ChatFileContext(
            files=list(files),
            client_name=client_name,
            expires_at=self._clock() + self.ttl_seconds,
        )
        logger.debug(f"Synced {len(files)} staged file(s) for chat {chat_id}")

    async def get(self, chat_id: str) -> ChatFileContext | None:
        """Return the live entry for a chat, or None when missing or expired."""
        entry = self._entries.get(str(chat_id))
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[str(chat_id)]
            return None
        return entry

    async def clear(self, chat_id: str) -> None:
        self._entries.pop(str(chat_id), None)

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, v in self._entries.items() if v.expires_at <= now]:
            del self._entries[key]
