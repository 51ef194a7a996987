"""Rule-based intent parsing and reply generation for the assistant."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable


class ResponseIntent(str, Enum):
    GREETING = "greeting"
    TIME = "time"
    DATE = "date"
    MOTIVATION = "motivation"
    FUN_FACT = "fun_fact"
    MINDFULNESS = "mindfulness"
    GRATITUDE = "gratitude"
    FAREWELL = "farewell"
    HELP = "help"
    FALLBACK = "fallback"


@dataclass(slots=True, frozen=True)
class AssistantResponse:
    text: str
    intent: str
    follow_up: str | None = None

    def combined(self) -> str:
        """Reply text with a non-blank follow-up appended after a blank line."""
        if self.follow_up and self.follow_up.strip():
            return f"{self.text}\n\n{self.follow_up}"
        return self.text


class ResponseIntentParser:
    """Maps free-form utterances to a response intent with keyword rules."""

    _RULES: tuple[tuple[ResponseIntent, re.Pattern[str]], ...] = (
        (ResponseIntent.TIME, re.compile(r"\b(?:what(?:'s| is)? the time|what time|the time|current time|clock)\b")),
        (ResponseIntent.DATE, re.compile(r"\b(?:what(?:'s| is)? the date|today's date|what day|which day)\b")),
        (ResponseIntent.FAREWELL, re.compile(r"\b(?:goodbye|good bye|bye|see you|good night|farewell)\b")),
        (ResponseIntent.GRATITUDE, re.compile(r"\b(?:thanks|thank you|appreciate it|cheers)\b")),
        (ResponseIntent.HELP, re.compile(r"\b(?:help|what can you do|who are you|your name)\b")),
        (
            ResponseIntent.MOTIVATION,
            re.compile(r"\b(?:motivat\w*|encourag\w*|inspir\w*|boost|pep talk|feeling down|stressed|tired)\b"),
        ),
        (
            ResponseIntent.FUN_FACT,
            re.compile(r"\b(?:fun fact|something curious|curious|interesting|did you know|tell me something)\b"),
        ),
        (
            ResponseIntent.MINDFULNESS,
            re.compile(r"\b(?:mindful\w*|reflect\w*|breath\w*|meditat\w*|calm|journal\w*|prompt)\b"),
        ),
        (ResponseIntent.GREETING, re.compile(r"\b(?:hello|hi|hey|hiya|greetings|good (?:morning|afternoon|evening))\b")),
    )

    def parse(self, utterance: str) -> ResponseIntent:
        lowered = " ".join(utterance.strip().lower().split())
        if not lowered:
            return ResponseIntent.FALLBACK

        for intent, pattern in self._RULES:
            if pattern.search(lowered):
                return intent
        return ResponseIntent.FALLBACK


_MOTIVATION = (
    "Small steps still move you forward. Pick one tiny task and let it count.",
    "You have handled hard days before, and you are still here. That is strength.",
    "Progress is rarely loud. Keep going; the quiet effort adds up.",
)

_FUN_FACTS = (
    "Octopuses have three hearts, and two of them pause when they swim.",
    "Honey never spoils. Archaeologists have tasted 3,000-year-old honey that was still good.",
    "A day on Venus is longer than its year.",
)

_MINDFUL_PROMPTS = (
    "Take a slow breath in for four counts, hold for four, and let it go for six.",
    "Name three things you can see, two you can hear, and one you can feel right now.",
    "What is one thing that went well today, however small?",
)


class ResponseGenerator:
    """Produces assistant replies for recognized utterances."""

    def __init__(
        self,
        *,
        assistant_name: str = "Aurora",
        parser: ResponseIntentParser | None = None,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ) -> None:
        self._name = assistant_name
        self._parser = parser or ResponseIntentParser()
        self._clock = clock
        self._rng = rng or random.Random()

    def generate(self, text: str) -> AssistantResponse:
        intent = self._parser.parse(text)

        if intent == ResponseIntent.GREETING:
            return AssistantResponse(
                text=f"Hello! I'm {self._name}, your ambient voice companion.",
                follow_up="How are you feeling right now?",
                intent=intent.value,
            )

        if intent == ResponseIntent.TIME:
            now = self._clock()
            return AssistantResponse(
                text=f"It is {now.strftime('%I:%M %p').lstrip('0')}.",
                follow_up="Want a quick mindful pause before your next task?",
                intent=intent.value,
            )

        if intent == ResponseIntent.DATE:
            now = self._clock()
            return AssistantResponse(text=f"Today is {now.strftime('%A, %B')} {now.day}.", intent=intent.value)

        if intent == ResponseIntent.MOTIVATION:
            return AssistantResponse(
                text=self._rng.choice(_MOTIVATION),
                follow_up="What is one thing you want to get done next?",
                intent=intent.value,
            )

        if intent == ResponseIntent.FUN_FACT:
            return AssistantResponse(text=self._rng.choice(_FUN_FACTS), intent=intent.value)

        if intent == ResponseIntent.MINDFULNESS:
            return AssistantResponse(
                text=self._rng.choice(_MINDFUL_PROMPTS),
                follow_up="Take your time. I'm here when you're ready.",
                intent=intent.value,
            )

        if intent == ResponseIntent.GRATITUDE:
            return AssistantResponse(text="You're very welcome. I'm glad to help.", intent=intent.value)

        if intent == ResponseIntent.FAREWELL:
            return AssistantResponse(text="Goodbye for now. Take good care of yourself.", intent=intent.value)

        if intent == ResponseIntent.HELP:
            return AssistantResponse(
                text=f"I'm {self._name}. I can tell you the time, share a motivation boost, "
                "offer a mindful prompt, or tell you something curious.",
                intent=intent.value,
            )

        return AssistantResponse(
            text="I'm still learning that one.",
            follow_up="Try asking for the time, a fun fact, or a motivation boost.",
            intent=intent.value,
        )


_default_generator = ResponseGenerator()


def generate_response(text: str) -> AssistantResponse:
    """Generate a reply with the default assistant persona."""
    return _default_generator.generate(text)
