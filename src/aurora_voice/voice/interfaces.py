"""Contracts for speech recognition and synthesis devices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from aurora_voice.models import RecognitionEvent


class RecognitionDevice(Protocol):
    """Callback-driven speech recognizer, one utterance per ``start`` call.

    Handlers are assigned by the engine and must be invoked on the event loop
    thread.
    """

    continuous: bool
    interim_results: bool
    language: str
    on_start: Callable[[], None] | None
    on_result: Callable[[RecognitionEvent], None] | None
    on_error: Callable[[str], None] | None
    on_end: Callable[[], None] | None

    def start(self) -> None:
        """Begin capture; raise if capture cannot start."""

    def stop(self) -> None:
        """Stop capture, letting the device report end-of-capture."""

    def abort(self) -> None:
        """Stop capture immediately and release the microphone."""


@dataclass(slots=True, frozen=True)
class SpeechUtterance:
    """Text plus voice parameters for one synthesis request."""

    text: str
    pitch: float = 1.0
    rate: float = 1.0
    volume: float = 1.0


class SynthesisDevice(Protocol):
    """Converts text responses into audible speech."""

    def speak(self, utterance: SpeechUtterance, on_done: Callable[[], None]) -> None:
        """Start speaking and call ``on_done`` once playback finishes or fails.

        ``on_done`` may be called from any thread.
        """

    def cancel(self) -> None:
        """Interrupt any in-flight utterance."""


@dataclass(slots=True, frozen=True)
class PlatformCapabilities:
    """Speech facilities available on the host, probed once at session start."""

    recognition_factory: Callable[[], RecognitionDevice] | None = None
    synthesizer: SynthesisDevice | None = None
