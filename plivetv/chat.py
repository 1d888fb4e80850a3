"""Chat session manager — the conversation overlay behind a story branch.

Lifecycle of the one open session:

    idle ──open()──▶ opening ──▶ ready ──submit()──▶ awaiting_reply ──▶ ready ...
                                   │                                      │
                                   └──────────────close()─────────────────┴──▶ closed

open() seeds the history with the character's hook line before any
network call. submit() replays the whole history to the completion backend;
a failed call is answered with a fixed in-character line instead of an
error, and nothing is retried. A reply that arrives after its session was
closed or replaced is dropped.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Literal

from pydantic import BaseModel, Field

from plivetv.llm import CompletionBackend
from plivetv.models import Character, ChatMessage, Series
from plivetv.prompts import build_system_context

logger = logging.getLogger(__name__)

ChatState = Literal["idle", "opening", "awaiting_reply", "ready", "closed"]

EMPTY_REPLY = "I'm lost in the moment..."
SIGNAL_LOST = "The signal is weak... can you say that again?"


class ChatSession(BaseModel):
    """One open overlay: a character, the episode it reacts to, and the history."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    character: Character
    episode_label: str
    system_context: str
    messages: list[ChatMessage] = Field(default_factory=list)
    pending: bool = False
    state: ChatState = "opening"


class ChatSessionManager:
    def __init__(self, backend: CompletionBackend, series: Series) -> None:
        self._backend = backend
        self._series = series
        self._session: ChatSession | None = None
        self._closed = False

    @property
    def session(self) -> ChatSession | None:
        return self._session

    @property
    def state(self) -> ChatState:
        if self._session is not None:
            return self._session.state
        return "closed" if self._closed else "idle"

    def open(self, character: Character, episode_label: str, hook_text: str) -> ChatSession:
        """Start a fresh session, discarding any session already open."""
        if self._session is not None:
            logger.info("replacing chat session %s", self._session.id)
            self.close()

        session = ChatSession(
            character=character,
            episode_label=episode_label,
            system_context=build_system_context(self._series, character, episode_label),
        )
        self._session = session
        session.messages.append(ChatMessage(role="model", text=hook_text))
        session.state = "ready"
        self._closed = False
        logger.debug("opened chat session %s with %s (%s)", session.id, character.id, episode_label)
        return session

    async def submit(self, user_text: str) -> ChatMessage | None:
        """Send one user turn. Returns the model's message, or None if nothing
        was sent or the session went away before the reply arrived."""
        session = self._session
        if session is None or session.pending:
            return None
        text = user_text.strip()
        if not text:
            return None

        history = list(session.messages)
        session.messages.append(ChatMessage(role="user", text=text))
        session.pending = True
        session.state = "awaiting_reply"

        try:
            reply = await self._backend(history, text, session.system_context)
        except asyncio.CancelledError:
            if self._session is session:
                self._settle(session)
            raise
        except Exception as e:
            logger.warning("completion failed for session %s, using fallback line: %s", session.id, e)
            reply_text = SIGNAL_LOST
        else:
            reply_text = (reply or "").strip() or EMPTY_REPLY

        if self._session is not session:
            logger.warning("dropping reply for closed chat session %s", session.id)
            return None

        message = ChatMessage(role="model", text=reply_text)
        session.messages.append(message)
        self._settle(session)
        return message

    def close(self) -> None:
        if self._session is None:
            return
        logger.debug("closed chat session %s", self._session.id)
        self._session.state = "closed"
        self._session = None
        self._closed = True

    def snapshot(self) -> dict[str, Any] | None:
        if self._session is None:
            return None
        return self._session.model_dump(exclude={"system_context"})

    @staticmethod
    def _settle(session: ChatSession) -> None:
        session.pending = False
        session.state = "ready"
