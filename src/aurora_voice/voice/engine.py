"""Status-driven wrapper around platform speech recognition and synthesis."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from aurora_voice.models import (
    Capabilities,
    RecognitionErrorCode,
    RecognitionEvent,
    RecognitionSegment,
    SpeechStatus,
)

from .interfaces import PlatformCapabilities, RecognitionDevice, SpeechUtterance
from .reconciliation import reconcile_results

FinalTranscriptHandler = Callable[[str], Union[Awaitable[None], None]]
SegmentHandler = Callable[[RecognitionSegment], None]
StatusListener = Callable[[SpeechStatus, Union[str, None]], None]

_ERROR_SIGNALS: dict[str, RecognitionErrorCode] = {
    "permission-denied": RecognitionErrorCode.PERMISSION_DENIED,
    "not-allowed": RecognitionErrorCode.PERMISSION_DENIED,
    "service-not-allowed": RecognitionErrorCode.PERMISSION_DENIED,
    "no-speech": RecognitionErrorCode.NO_SPEECH,
    "network": RecognitionErrorCode.NETWORK,
    "aborted": RecognitionErrorCode.ABORTED,
    "unsupported": RecognitionErrorCode.UNSUPPORTED,
    "language-not-supported": RecognitionErrorCode.UNSUPPORTED,
}

_ERROR_MESSAGES: dict[RecognitionErrorCode, str] = {
    RecognitionErrorCode.PERMISSION_DENIED: "Microphone permission was denied.",
    RecognitionErrorCode.NO_SPEECH: "I didn't hear anything. Try speaking again.",
    RecognitionErrorCode.NETWORK: "The speech recognition service could not be reached.",
    RecognitionErrorCode.ABORTED: "Listening was interrupted.",
    RecognitionErrorCode.UNSUPPORTED: "Speech recognition is not supported for this language or device.",
    RecognitionErrorCode.UNKNOWN: "Speech recognition failed.",
}

RESPONSE_FAILURE_MESSAGE = "Something went wrong while preparing a reply."


def map_recognition_error(signal: str | None) -> RecognitionErrorCode:
    """Map a platform error string onto the recognition error taxonomy."""
    if not signal:
        return RecognitionErrorCode.UNKNOWN
    return _ERROR_SIGNALS.get(signal.strip().lower(), RecognitionErrorCode.UNKNOWN)


def describe_recognition_error(code: RecognitionErrorCode, signal: str | None = None) -> str:
    message = _ERROR_MESSAGES[code]
    if code == RecognitionErrorCode.UNKNOWN and signal:
        return f"{message[:-1]} ({signal})."
    return message


class CancellationToken:
    """One-shot signal used to release a suspended ``speak`` call."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(slots=True)
class VoiceOutputConfig:
    """Configurable controls for response speech."""

    pitch: float = 1.05
    rate: float = 1.0
    volume: float = 1.0


class SpeechEngine:
    """Owns the recognition and synthesis devices for one session.

    Callers never see device callbacks. They start and stop listening, await
    ``speak`` and observe ``status``/``error`` (directly or through
    ``subscribe``).
    """

    def __init__(
        self,
        platform: PlatformCapabilities,
        *,
        language: str = "en-US",
        voice: VoiceOutputConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._platform = platform
        self._language = language
        self._voice = voice or VoiceOutputConfig()
        self._logger = logger or logging.getLogger("aurora_voice.speech_engine")

        self._status = SpeechStatus.IDLE
        self._error: str | None = None
        self._error_code: RecognitionErrorCode | None = None
        self._listeners: list[StatusListener] = []

        self._recognition: RecognitionDevice | None = None
        self._final_handler: FinalTranscriptHandler | None = None
        self._segment_handler: SegmentHandler | None = None
        self._session_id = 0
        self._accepting_results = False
        self._pending: set[asyncio.Future[None]] = set()
        self._speech_token: CancellationToken | None = None
        self._closed = False

        self._initialize()

    def __enter__(self) -> SpeechEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def status(self) -> SpeechStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def error_code(self) -> RecognitionErrorCode | None:
        return self._error_code

    @property
    def language(self) -> str:
        return self._language

    @property
    def is_ready(self) -> bool:
        return self._recognition is not None

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(
            microphone=self._recognition is not None,
            speech_synthesis=self._platform.synthesizer is not None,
        )

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status/error listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def set_language(self, language: str) -> None:
        """Recreate the recognition handle for a different language tag."""
        if language == self._language or self._closed:
            return
        self._release_recognition()
        self._language = language
        self._initialize()

    def start_listening(
        self,
        on_final: FinalTranscriptHandler,
        on_segment: SegmentHandler | None = None,
    ) -> bool:
        """Begin one listening turn; returns ``False`` when capture did not start.

        If the device refuses to start, the previous session (if any) keeps
        its handlers so a capture that is still running is not orphaned.
        """
        device = self._recognition
        if device is None:
            return False

        previous = (
            self._session_id,
            self._accepting_results,
            self._final_handler,
            self._segment_handler,
            (device.on_start, device.on_result, device.on_error, device.on_end),
        )
        self._final_handler = on_final
        self._segment_handler = on_segment
        session = self._bind_session(device)
        try:
            device.start()
        except Exception as exc:  # noqa: BLE001 - start failures surface through status.
            (
                self._session_id,
                self._accepting_results,
                self._final_handler,
                self._segment_handler,
                (device.on_start, device.on_result, device.on_error, device.on_end),
            ) = previous
            code = (
                RecognitionErrorCode.PERMISSION_DENIED
                if isinstance(exc, PermissionError)
                else RecognitionErrorCode.UNKNOWN
            )
            self._logger.warning("speech_start_failed", extra={"session": session, "error": str(exc)})
            self._fail(str(exc) or "Unable to start microphone.", code)
            return False

        self._logger.info("speech_listening_requested", extra={"session": session, "language": self._language})
        return True

    def stop_listening(self) -> None:
        """Stop the current capture; safe to call at any time."""
        self._accepting_results = False
        if self._recognition is not None:
            self._recognition.stop()

    async def speak(self, text: str, token: CancellationToken | None = None) -> None:
        """Speak ``text`` and return once it finishes, fails or is superseded."""
        synthesizer = self._platform.synthesizer
        normalized = " ".join(text.split())
        if synthesizer is None or self._closed or not normalized:
            self._logger.debug("speech_synthesis_skipped", extra={"chars": len(normalized)})
            return

        if self._speech_token is not None:
            self._speech_token.cancel()
        synthesizer.cancel()

        token = token or CancellationToken()
        self._speech_token = token
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not finished.done():
                finished.set_result(None)

        def _on_done() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve)

        utterance = SpeechUtterance(
            text=normalized,
            pitch=self._voice.pitch,
            rate=self._voice.rate,
            volume=self._voice.volume,
        )
        self._set_status(SpeechStatus.SPEAKING)
        cancelled = asyncio.ensure_future(token.wait())
        try:
            try:
                synthesizer.speak(utterance, _on_done)
            except Exception:  # noqa: BLE001 - a failed utterance still completes the turn.
                self._logger.exception("speech_synthesis_failed", extra={"chars": len(normalized)})
                _resolve()
            await asyncio.wait({finished, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()
            if self._speech_token is token:
                if not finished.done():
                    synthesizer.cancel()
                self._speech_token = None
                if not self._closed:
                    self._set_status(self._resting_status())

        self._logger.info("speech_synthesis_finished", extra={"superseded": token.cancelled})

    def report_error(self, message: str, code: RecognitionErrorCode | None = None) -> None:
        """Surface a failure raised outside the recognition device.

        Without a ``code`` the failure is not attributed to the microphone.
        """
        self._fail(message, code)

    def clear_error(self) -> None:
        """Drop a recorded error once the session has recovered from it."""
        if self._error is None and self._status != SpeechStatus.ERROR:
            return
        self._error = None
        self._error_code = None
        if self._status == SpeechStatus.ERROR:
            self._status = self._resting_status()
        self._notify()

    def close(self) -> None:
        """Release both devices; no callbacks fire after this returns."""
        if self._closed:
            return
        self._closed = True
        self._release_recognition()
        self._final_handler = None
        self._segment_handler = None

        if self._speech_token is not None:
            self._speech_token.cancel()
        synthesizer = self._platform.synthesizer
        if synthesizer is not None:
            try:
                synthesizer.cancel()
            except Exception:  # noqa: BLE001 - teardown must not raise.
                self._logger.warning("speech_synthesis_release_failed", exc_info=True)

        for task in list(self._pending):
            task.cancel()
        self._listeners.clear()
        self._logger.info("speech_engine_closed")

    def _initialize(self) -> None:
        factory = self._platform.recognition_factory
        if factory is None:
            self._set_status(SpeechStatus.UNSUPPORTED)
            self._logger.info("speech_recognition_unsupported")
            return

        device = factory()
        device.continuous = False
        device.interim_results = True
        device.language = self._language
        self._recognition = device
        self._logger.info("speech_recognition_ready", extra={"language": self._language})

    def _release_recognition(self) -> None:
        device = self._recognition
        self._recognition = None
        self._session_id += 1
        self._accepting_results = False
        if device is None:
            return

        device.on_start = None
        device.on_result = None
        device.on_error = None
        device.on_end = None
        try:
            device.abort()
        except Exception:  # noqa: BLE001 - teardown must not raise.
            self._logger.warning("speech_device_release_failed", exc_info=True)

    def _bind_session(self, device: RecognitionDevice) -> int:
        self._session_id += 1
        session = self._session_id
        self._accepting_results = True
        device.on_start = lambda: self._handle_start(session)
        device.on_result = lambda event: self._handle_result(session, event)
        device.on_error = lambda signal: self._handle_error(session, signal)
        device.on_end = lambda: self._handle_end(session)
        return session

    def _is_stale(self, session: int) -> bool:
        return self._closed or session != self._session_id

    def _handle_start(self, session: int) -> None:
        if self._is_stale(session):
            return
        self._error = None
        self._error_code = None
        self._status = SpeechStatus.LISTENING
        self._notify()

    def _handle_result(self, session: int, event: RecognitionEvent) -> None:
        if self._is_stale(session) or not self._accepting_results:
            self._logger.debug("speech_result_dropped", extra={"session": session})
            return

        batch = reconcile_results(event.result_index, event.results)
        if self._segment_handler is not None:
            self._segment_handler(batch.segment())

        if not batch.is_final or self._final_handler is None:
            return

        # Non-continuous capture yields a single utterance per session.
        self._accepting_results = False
        self._set_status(SpeechStatus.PROCESSING)
        try:
            outcome = self._final_handler(batch.final_transcript)
        except Exception:  # noqa: BLE001 - handler failures must not break the engine.
            self._logger.exception("final_transcript_handler_failed", extra={"session": session})
            self._fail(RESPONSE_FAILURE_MESSAGE, None)
            return

        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._pending.add(task)
            task.add_done_callback(self._handle_final_outcome)

    def _handle_final_outcome(self, task: asyncio.Future[None]) -> None:
        self._pending.discard(task)
        if task.cancelled() or self._closed:
            return

        exc = task.exception()
        if exc is not None:
            self._logger.error("final_transcript_handler_failed", exc_info=exc)
            self._fail(RESPONSE_FAILURE_MESSAGE, None)
            return

        if self._status == SpeechStatus.PROCESSING:
            self._set_status(SpeechStatus.IDLE)

    def _handle_error(self, session: int, signal: str) -> None:
        if self._is_stale(session):
            return
        code = map_recognition_error(signal)
        self._logger.warning("speech_recognition_error", extra={"session": session, "signal": signal})
        self._fail(describe_recognition_error(code, signal), code)

    def _handle_end(self, session: int) -> None:
        if self._is_stale(session):
            return
        self._accepting_results = False
        if self._status == SpeechStatus.SPEAKING:
            return
        if self._status == SpeechStatus.PROCESSING and self._pending:
            return
        self._set_status(SpeechStatus.IDLE)

    def _resting_status(self) -> SpeechStatus:
        if self._recognition is None and self._platform.recognition_factory is None:
            return SpeechStatus.UNSUPPORTED
        return SpeechStatus.IDLE

    def _fail(self, message: str, code: RecognitionErrorCode | None) -> None:
        self._error = message
        self._error_code = code
        self._status = SpeechStatus.ERROR
        self._notify()

    def _set_status(self, status: SpeechStatus) -> None:
        if status == self._status:
            return
        self._logger.debug("speech_status_changed", extra={"previous": self._status.value, "current": status.value})
        self._status = status
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._status, self._error)
            except Exception:  # noqa: BLE001 - a faulty observer must not stall the session.
                self._logger.exception("speech_status_listener_failed")
