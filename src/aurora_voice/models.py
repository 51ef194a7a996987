from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator


class SpeechStatus(str, Enum):
    """Lifecycle states for the speech engine."""

    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    UNSUPPORTED = "unsupported"
    ERROR = "error"


class RecognitionErrorCode(str, Enum):
    """Recognition failures surfaced to the conversation UI."""

    PERMISSION_DENIED = "permission-denied"
    NO_SPEECH = "no-speech"
    NETWORK = "network"
    ABORTED = "aborted"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(slots=True, frozen=True)
class RecognitionAlternative:
    transcript: str
    confidence: float = 1.0


@dataclass(slots=True, frozen=True)
class RecognitionResult:
    """One recognized phrase with its ranked alternatives."""

    alternatives: tuple[RecognitionAlternative, ...]
    is_final: bool = False


@dataclass(slots=True, frozen=True)
class RecognitionEvent:
    """Payload of a single recognizer callback."""

    result_index: int
    results: tuple[RecognitionResult, ...]


@dataclass(slots=True, frozen=True)
class RecognitionSegment:
    interim_transcript: str
    is_final: bool


@dataclass(slots=True, frozen=True)
class Capabilities:
    microphone: bool = False
    speech_synthesis: bool = False


@dataclass(slots=True, frozen=True)
class Message:
    id: str
    role: MessageRole
    content: str
    timestamp: float


@dataclass(slots=True)
class ConversationLog:
    """Append-only ordered sequence of conversation messages."""

    clock: Callable[[], float] = time.time
    _messages: list[Message] = field(default_factory=list)

    def append(self, role: MessageRole, content: str) -> Message:
        now = self.clock()
        if self._messages:
            now = max(now, self._messages[-1].timestamp)
        message = Message(
            id=f"{role.value}-{len(self._messages)}-{int(now * 1000)}",
            role=role,
            content=content,
            timestamp=now,
        )
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
