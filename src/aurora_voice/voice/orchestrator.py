"""Conversation turn sequencing on top of the speech engine."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Union

from aurora_voice.config import DEFAULT_GREETING
from aurora_voice.models import Capabilities, ConversationLog, Message, MessageRole, RecognitionSegment, SpeechStatus
from aurora_voice.responses import AssistantResponse, generate_response
from aurora_voice.telemetry.logging import LoggingTelemetry, Telemetry

from .engine import RESPONSE_FAILURE_MESSAGE, SpeechEngine
from .indicator import StatusIndicator, describe_status

ResponseHandler = Callable[[str], Union[AssistantResponse, Awaitable[AssistantResponse]]]


class ResponseGenerationError(RuntimeError):
    """Raised when the response handler fails to produce a reply."""


class TurnOrchestrator:
    """Bridges speech engine events and the response handler, one turn at a time.

    The conversation log is only ever appended to here. A turn appends the
    user message, asks the response handler for a reply, appends the reply and
    then waits for it to be spoken before the next turn may begin.
    """

    def __init__(
        self,
        engine: SpeechEngine,
        *,
        respond: ResponseHandler = generate_response,
        greeting: str | None = DEFAULT_GREETING,
        thinking_delay_seconds: float = 0.35,
        clock: Callable[[], float] = time.time,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if thinking_delay_seconds < 0:
            raise ValueError("thinking_delay_seconds must be non-negative")

        self._engine = engine
        self._respond = respond
        self._thinking_delay_seconds = thinking_delay_seconds
        self._telemetry = telemetry or LoggingTelemetry()
        self._logger = logger or logging.getLogger("aurora_voice.orchestrator")

        self._log = ConversationLog(clock=clock)
        if greeting:
            self._log.append(MessageRole.ASSISTANT, greeting)
        self._interim_transcript = ""
        self._thinking = False
        self._turn_active = False
        self._turn_task: asyncio.Future | None = None
        self._closed = False

    @property
    def engine(self) -> SpeechEngine:
        return self._engine

    @property
    def status(self) -> SpeechStatus:
        return self._engine.status

    @property
    def error(self) -> str | None:
        return self._engine.error

    @property
    def capabilities(self) -> Capabilities:
        return self._engine.capabilities

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._log.messages

    @property
    def interim_transcript(self) -> str:
        return self._interim_transcript

    @property
    def is_thinking(self) -> bool:
        return self._thinking

    @property
    def turn_active(self) -> bool:
        return self._turn_active

    @property
    def indicator(self) -> StatusIndicator:
        return describe_status(self._engine.status, self._engine.error, self._engine.error_code)

    def toggle_listening(self) -> bool:
        """Start a listening turn, or stop the current one.

        Returns ``True`` only when a new capture was started.
        """
        if not self._engine.capabilities.microphone:
            return False

        status = self._engine.status
        if status == SpeechStatus.LISTENING:
            self._engine.stop_listening()
            return False

        if status in (SpeechStatus.PROCESSING, SpeechStatus.SPEAKING) or self._turn_active:
            self._logger.debug("listen_request_ignored", extra={"status": status.value})
            return False

        return self._engine.start_listening(on_final=self._handle_final, on_segment=self._handle_segment)

    async def submit_text(self, content: str) -> Message | None:
        """Run a typed turn; returns the assistant reply, or ``None`` if no reply was produced."""
        trimmed = content.strip()
        if not trimmed or self._closed:
            return None
        if self._turn_active:
            self._logger.info("text_submission_ignored", extra={"reason": "turn_active"})
            return None

        if self._engine.status == SpeechStatus.LISTENING:
            self._engine.stop_listening()

        task = asyncio.ensure_future(self._run_turn(trimmed))
        self._turn_task = task
        try:
            return await task
        except ResponseGenerationError:
            self._logger.exception("text_turn_failed")
            self._engine.report_error(RESPONSE_FAILURE_MESSAGE)
            return None
        except asyncio.CancelledError:
            if not self._closed:
                raise
            self._logger.info("text_turn_cancelled")
            return None
        finally:
            if self._turn_task is task:
                self._turn_task = None

    def close(self) -> None:
        """Cancel the turn in flight and release the speech engine."""
        self._closed = True
        task = self._turn_task
        self._turn_task = None
        if task is not None and not task.done():
            task.cancel()
        self._engine.close()

    def _handle_segment(self, segment: RecognitionSegment) -> None:
        self._interim_transcript = segment.interim_transcript

    async def _handle_final(self, transcript: str) -> None:
        self._interim_transcript = ""
        if not transcript.strip():
            self._logger.debug("empty_transcript_ignored")
            return
        task = asyncio.current_task()
        self._turn_task = task
        try:
            await self._run_turn(transcript.strip())
        finally:
            if self._turn_task is task:
                self._turn_task = None

    async def _run_turn(self, text: str) -> Message:
        self._turn_active = True
        self._log.append(MessageRole.USER, text)
        self._telemetry.emit("turn_started", {"chars": len(text), "messages": len(self._log)})
        try:
            self._thinking = True
            try:
                outcome = self._respond(text)
                response = await outcome if inspect.isawaitable(outcome) else outcome
                reply = response.combined()
            except Exception as exc:  # noqa: BLE001 - any handler failure withholds the reply.
                raise ResponseGenerationError(f"{type(exc).__name__}: {exc}") from exc
            self._engine.clear_error()

            if self._thinking_delay_seconds > 0:
                await asyncio.sleep(self._thinking_delay_seconds)

            message = self._log.append(MessageRole.ASSISTANT, reply)
            await self._engine.speak(reply)
            self._telemetry.emit(
                "turn_completed",
                {"intent": response.intent, "reply_id": message.id, "messages": len(self._log)},
            )
            return message
        finally:
            self._thinking = False
            self._turn_active = False
