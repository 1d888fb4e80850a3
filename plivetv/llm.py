"""Completion backend — HTTP connection to a chat-completion service.

The chat session manager injects a backend callable matching the protocol:

    async def __call__(self, history, message, system_context) -> str: ...

`history` is the session's message list before the new user turn,
`message` is the user's text and `system_context` the persona instruction
rendered once when the session opened. The backend is stateless: the full
history is replayed on every call.

Two implementations are provided:

    HttpCompletion — real HTTP client, supports the Gemini generateContent
                     API and OpenAI-compatible chat completions. Selected by
                     provider_format.
    EchoCompletion — returns the user message back unchanged. Useful for
                     smoke-testing the app without a configured backend.

Tests use StubCompletion (defined in conftest) instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal, Protocol

import httpx

from plivetv.models import ChatMessage

if TYPE_CHECKING:
    from plivetv.config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every backend implementation must match this signature
# ---------------------------------------------------------------------------

class CompletionBackend(Protocol):
    async def __call__(
        self, history: Sequence[ChatMessage], message: str, system_context: str
    ) -> str: ...


# ---------------------------------------------------------------------------
# HttpCompletion — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["gemini", "openai"]


class HttpCompletion:
    """Async HTTP client for chat-completion backends.

    Supported formats:
      "gemini"  — POST /v1beta/models/{model}:generateContent
                  {"systemInstruction": ..., "contents": [{"role", "parts"}]}
                  Response: {"candidates": [{"content": {"parts": [{"text"}]}}]}
      "openai"  — POST /v1/chat/completions  {"model": ..., "messages": [...]}
                  Response: {"choices": [{"message": {"content": "..."}}]}

    Args:
        provider_url:    Base URL, e.g. "https://generativelanguage.googleapis.com".
        api_key:         Credential, or empty string if not required.
        provider_format: Wire format to use. Defaults to "gemini".
        model:           Model identifier.
        timeout:         HTTP timeout in seconds. Defaults to 60.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "gemini",
        model: str = "gemini-3-flash-preview",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            if self._format == "gemini":
                headers["x-goog-api-key"] = self._api_key
            else:
                headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(
        self, history: Sequence[ChatMessage], message: str, system_context: str
    ) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            messages = [{"role": "system", "content": system_context}]
            for m in history:
                role = "assistant" if m.role == "model" else "user"
                messages.append({"role": role, "content": m.text})
            messages.append({"role": "user", "content": message})
            body: dict = {"messages": messages}
            if self._model:
                body["model"] = self._model
            return url, body

        # gemini (default)
        url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
        contents = [{"role": m.role, "parts": [{"text": m.text}]} for m in history]
        contents.append({"role": "user", "parts": [{"text": message}]})
        return url, {
            "systemInstruction": {"parts": [{"text": system_context}]},
            "contents": contents,
        }

    def _parse_response(self, data: dict) -> str:
        """Extract the reply text from the response body."""
        if self._format == "openai":
            choices = data.get("choices")
            if not choices or "message" not in choices[0]:
                raise CompletionError("Unexpected response format from OpenAI-compatible backend")
            return choices[0]["message"].get("content") or ""

        # gemini
        candidates = data.get("candidates")
        if not candidates or "content" not in candidates[0]:
            raise CompletionError("Unexpected response format from Gemini backend")
        parts = candidates[0]["content"].get("parts") or []
        return "".join(p.get("text", "") for p in parts)

    async def __call__(
        self, history: Sequence[ChatMessage], message: str, system_context: str
    ) -> str:
        url, body = self._build_request(history, message, system_context)
        logger.debug("completion call url=%s history_len=%d", url, len(history))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise CompletionError(f"Cannot connect to completion backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise CompletionError(
                f"Completion backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise CompletionError(f"Completion backend timed out after {self._timeout}s") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError("Completion backend returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise CompletionError("Unexpected response format from completion backend")

        text = self._parse_response(data)
        logger.debug("completion response len=%d", len(text))
        return text


# ---------------------------------------------------------------------------
# EchoCompletion — returns the user message; no network
# ---------------------------------------------------------------------------

class EchoCompletion:
    """Returns the user's message as-is. No network calls.

    Lets you click through the feed and chat overlay without a configured
    completion backend.
    """

    async def __call__(
        self, history: Sequence[ChatMessage], message: str, system_context: str
    ) -> str:
        logger.debug("EchoCompletion history_len=%d", len(history))
        return message


def build_backend(settings: Settings) -> CompletionBackend:
    """HttpCompletion when a provider URL is configured, EchoCompletion otherwise."""
    if not settings.provider_url:
        logger.info("No completion provider configured, using EchoCompletion")
        return EchoCompletion()
    return HttpCompletion(
        provider_url=settings.provider_url,
        api_key=settings.api_key,
        provider_format=settings.provider_format,
        model=settings.model,
        timeout=settings.timeout,
    )


# ---------------------------------------------------------------------------
# CompletionError — raised by HttpCompletion for all connection and protocol failures
# ---------------------------------------------------------------------------

class CompletionError(RuntimeError):
    """Raised when the completion backend cannot be reached or returns an error."""
