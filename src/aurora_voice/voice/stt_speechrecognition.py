"""Recognition device powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from aurora_voice.models import RecognitionAlternative, RecognitionEvent, RecognitionResult

from .interfaces import RecognitionDevice

logger = logging.getLogger("aurora_voice.stt")


class SpeechRecognitionDevice(RecognitionDevice):
    """Capture one utterance from the microphone and transcribe it with Google's web recognizer.

    Blocking capture runs on a worker thread; every handler call is marshalled
    back onto the event loop that called ``start``.
    """

    def __init__(
        self,
        *,
        phrase_time_limit: float = 8.0,
        timeout: float | None = 5.0,
        sample_rate: int = 16_000,
        chunk_size: int = 1024,
        adjust_noise_seconds: float = 0.2,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice STT backend unavailable. Install extras with: pip install 'aurora-voice[voice]'"
            ) from exc
        self._sr = sr
        self._recognizer = sr.Recognizer()
        self._sample_rate = sample_rate
        self._chunk_size = chunk_size
        self._phrase_time_limit = phrase_time_limit
        self._timeout = timeout
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)

        self.continuous = False
        self.interim_results = True
        self.language = "en-US"
        self.on_start: Callable[[], None] | None = None
        self.on_result: Callable[[RecognitionEvent], None] | None = None
        self.on_error: Callable[[str], None] | None = None
        self.on_end: Callable[[], None] | None = None

        self._lock = threading.Lock()
        self._run = 0
        self._active = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._end_handler: Callable[[], None] | None = None

    def start(self) -> None:
        with self._lock:
            if self._active:
                raise RuntimeError("Recognition has already started.")
            loop = asyncio.get_running_loop()
            microphone = self._sr.Microphone(sample_rate=self._sample_rate, chunk_size=self._chunk_size)
            self._run += 1
            self._active = True
            self._loop = loop
            self._end_handler = self.on_end
            handlers = (self.on_start, self.on_result, self.on_error, self.on_end)
            run = self._run

        threading.Thread(
            target=self._capture,
            args=(loop, run, microphone, handlers),
            name="speech-recognition",
            daemon=True,
        ).start()

    def stop(self) -> None:
        end_handler = self._cancel_run()
        if end_handler is not None and self._loop is not None:
            self._loop.call_soon(end_handler)

    def abort(self) -> None:
        self._cancel_run()

    def _cancel_run(self) -> Callable[[], None] | None:
        with self._lock:
            if not self._active:
                return None
            self._run += 1
            self._active = False
            handler, self._end_handler = self._end_handler, None
            return handler

    def _capture(self, loop: asyncio.AbstractEventLoop, run: int, microphone: Any, handlers: tuple) -> None:
        on_start, on_result, on_error, on_end = handlers
        sr = self._sr
        self._emit(loop, run, on_start)
        try:
            with microphone as source:
                if self._adjust_noise_seconds > 0:
                    self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
                audio = self._recognizer.listen(
                    source,
                    timeout=self._timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
            transcript = self._recognizer.recognize_google(audio, language=self.language)
        except (sr.WaitTimeoutError, sr.UnknownValueError):
            self._emit(loop, run, on_error, "no-speech")
        except sr.RequestError:
            logger.warning("speech_recognition_request_failed", exc_info=True)
            self._emit(loop, run, on_error, "network")
        except OSError:
            logger.warning("speech_recognition_capture_failed", exc_info=True)
            self._emit(loop, run, on_error, "audio-capture")
        else:
            result = RecognitionResult(
                alternatives=(RecognitionAlternative(transcript=str(transcript)),),
                is_final=True,
            )
            self._emit(loop, run, on_result, RecognitionEvent(result_index=0, results=(result,)))
        finally:
            self._emit(loop, run, on_end)
            with self._lock:
                if self._run == run:
                    self._active = False
                    self._end_handler = None

    def _emit(self, loop: asyncio.AbstractEventLoop, run: int, handler: Callable[..., None] | None, *args: Any) -> None:
        if handler is None or loop.is_closed():
            return
        with self._lock:
            if run != self._run:
                return
        loop.call_soon_threadsafe(handler, *args)
