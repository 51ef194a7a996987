"""Text-to-speech device powered by ``pyttsx3``."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .interfaces import SpeechUtterance, SynthesisDevice

logger = logging.getLogger("aurora_voice.tts")


class Pyttsx3SynthesisDevice(SynthesisDevice):
    """Speaker playback using a local pyttsx3 engine instance."""

    def __init__(self, *, voice_id: str | None = None, base_rate: int = 200) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice TTS backend unavailable. Install extras with: pip install 'aurora-voice[voice]'"
            ) from exc

        self._engine = pyttsx3.init()
        if voice_id:
            self._engine.setProperty("voice", voice_id)
        self._base_rate = base_rate
        self._playback_lock = threading.Lock()

    def speak(self, utterance: SpeechUtterance, on_done: Callable[[], None]) -> None:
        threading.Thread(
            target=self._play,
            args=(utterance, on_done),
            name="speech-synthesis",
            daemon=True,
        ).start()

    def cancel(self) -> None:
        self._engine.stop()

    def _play(self, utterance: SpeechUtterance, on_done: Callable[[], None]) -> None:
        try:
            with self._playback_lock:
                # pyttsx3 has no pitch control; rate is scaled from words per minute.
                self._engine.setProperty("rate", int(self._base_rate * utterance.rate))
                self._engine.setProperty("volume", max(0.0, min(1.0, utterance.volume)))
                self._engine.say(utterance.text)
                self._engine.runAndWait()
        except Exception:  # noqa: BLE001 - playback failures end the utterance.
            logger.exception("speech_playback_failed", extra={"chars": len(utterance.text)})
        finally:
            on_done()
