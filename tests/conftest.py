from __future__ import annotations

import asyncio

import pytest

from aurora_voice.models import RecognitionEvent, RecognitionResult
from aurora_voice.voice.interfaces import SpeechUtterance


class FakeRecognitionDevice:
    """In-memory recognizer; tests drive its callbacks by hand."""

    def __init__(self) -> None:
        self.continuous = True
        self.interim_results = False
        self.language = ""
        self.on_start = None
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self.fail_start: Exception | None = None
        self.starts = 0
        self.stops = 0
        self.aborts = 0

    def start(self) -> None:
        if self.fail_start is not None:
            raise self.fail_start
        self.starts += 1

    def stop(self) -> None:
        self.stops += 1

    def abort(self) -> None:
        self.aborts += 1

    def emit_start(self) -> None:
        if self.on_start:
            self.on_start()

    def emit_result(self, *results: RecognitionResult, result_index: int = 0) -> None:
        if self.on_result:
            self.on_result(RecognitionEvent(result_index=result_index, results=tuple(results)))

    def emit_error(self, signal: str) -> None:
        if self.on_error:
            self.on_error(signal)

    def emit_end(self) -> None:
        if self.on_end:
            self.on_end()


class FakeSynthesizer:
    """Records utterances; finishes each one on the next loop iteration unless held."""

    def __init__(self) -> None:
        self.auto_finish = True
        self.started: list[str] = []
        self.completed: list[str] = []
        self.interrupted: list[str] = []
        self._current: tuple[SpeechUtterance, object] | None = None

    def speak(self, utterance: SpeechUtterance, on_done) -> None:
        self.started.append(utterance.text)
        self._current = (utterance, on_done)
        if self.auto_finish:
            asyncio.get_running_loop().call_soon(self._finish, utterance)

    def cancel(self) -> None:
        if self._current is None:
            return
        utterance, on_done = self._current
        self._current = None
        self.interrupted.append(utterance.text)
        on_done()

    def finish(self) -> None:
        if self._current is not None:
            self._finish(self._current[0])

    def _finish(self, utterance: SpeechUtterance) -> None:
        if self._current is None or self._current[0] is not utterance:
            return
        _, on_done = self._current
        self._current = None
        self.completed.append(utterance.text)
        on_done()


@pytest.fixture
def recognition_device() -> FakeRecognitionDevice:
    return FakeRecognitionDevice()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def device_factory() -> type[FakeRecognitionDevice]:
    return FakeRecognitionDevice
