"""Chat session with the career coach.

A session is either IDLE or AWAITING_REPLY. Only one request may be in
flight; sends made while awaiting are rejected, not queued. History is
append-only and the whole of it is resent on every turn, so cost grows
with conversation length.
"""
from __future__ import annotations

import asyncio

from jobflow.analytics import coach_stats
from jobflow.config import resolve_api_key
from jobflow.context import assemble_briefing
from jobflow.errors import CollaboratorError, EmptyMessageError, MissingCredentialError, SessionBusyError
from jobflow.genai import ChatResult, GenAIClient
from jobflow.log import get_logger
from jobflow.models import ChatMessage
from jobflow.store import JobStore

log = get_logger(__name__)

IDLE = "idle"
AWAITING_REPLY = "awaiting_reply"

GREETING = "Hi! I'm Claire, your AI Career Companion. How can I help you with your job search today?"
FALLBACK_REPLY = "I'm having trouble connecting right now. Please try again later."


class CoachSession:
    def __init__(
        self,
        store: JobStore,
        client: GenAIClient,
        *,
        timeout: float | None = None,
        greeting: str | None = GREETING,
    ) -> None:
        self.store = store
        self.client = client
        self.timeout = float(timeout if timeout is not None else client.timeout)
        self.state = IDLE
        self._history: list[ChatMessage] = []
        if greeting:
            self._history.append(ChatMessage("model", greeting))

    @property
    def history(self) -> list[ChatMessage]:
        return list(self._history)

    @property
    def busy(self) -> bool:
        return self.state == AWAITING_REPLY

    def briefing(self) -> str:
        """Fresh briefing from the store's current jobs and résumé."""
        jobs = self.store.jobs
        return assemble_briefing(jobs, self.store.resume, coach_stats(jobs))

    async def send_user_message(self, text: str) -> ChatMessage:
        """Send *text* and return the model message appended in reply.

        Raises EmptyMessageError, SessionBusyError or MissingCredentialError
        without touching history. Service failures do not raise: they are
        logged and answered with FALLBACK_REPLY.
        """
        if not text or not text.strip():
            raise EmptyMessageError("Message is empty")
        if self.state == AWAITING_REPLY:
            raise SessionBusyError("Claire is still replying to the previous message")
        api_key = resolve_api_key(self.store.settings)
        if not api_key:
            raise MissingCredentialError("Please add your Gemini API key in Settings to chat with me!")

        prior = list(self._history)
        self._history.append(ChatMessage("user", text))
        self.state = AWAITING_REPLY
        try:
            result = await self._dispatch(api_key, self.briefing(), prior, text)
        finally:
            self.state = IDLE

        if result.ok:
            reply = ChatMessage("model", result.text)
        else:
            log.error("Coach reply failed: %s", result.error)
            reply = ChatMessage("model", FALLBACK_REPLY)
        self._history.append(reply)
        return reply

    async def _dispatch(self, api_key: str, framing: str, prior: list[ChatMessage], text: str) -> ChatResult:
        try:
            return await asyncio.wait_for(
                self.client.converse(api_key, framing, prior, text), timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return ChatResult.failure(f"No reply within {self.timeout:.0f}s")
        except CollaboratorError as exc:
            return ChatResult.failure(str(exc))
        except Exception as exc:
            log.exception("Coach backend raised unexpectedly")
            return ChatResult.failure(f"{type(exc).__name__}: {exc}")
