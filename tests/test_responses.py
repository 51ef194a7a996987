import random
from datetime import datetime

from aurora_voice.responses import (
    AssistantResponse,
    ResponseGenerator,
    ResponseIntent,
    ResponseIntentParser,
    generate_response,
)


def test_parser_maps_supported_intents() -> None:
    parser = ResponseIntentParser()

    assert parser.parse("hello there") == ResponseIntent.GREETING
    assert parser.parse("Good morning!") == ResponseIntent.GREETING
    assert parser.parse("can you tell me the time?") == ResponseIntent.TIME
    assert parser.parse("what's the date today") == ResponseIntent.DATE
    assert parser.parse("Share a motivation boost.") == ResponseIntent.MOTIVATION
    assert parser.parse("Tell me something curious.") == ResponseIntent.FUN_FACT
    assert parser.parse("Give me a mindful prompt") == ResponseIntent.MINDFULNESS
    assert parser.parse("thanks a lot") == ResponseIntent.GRATITUDE
    assert parser.parse("goodbye aurora") == ResponseIntent.FAREWELL
    assert parser.parse("what can you do") == ResponseIntent.HELP
    assert parser.parse("recite the tax code") == ResponseIntent.FALLBACK
    assert parser.parse("   ") == ResponseIntent.FALLBACK


def test_greeting_identifies_assistant() -> None:
    response = generate_response("hello there")

    assert response.intent == "greeting"
    assert "aurora" in response.text.lower()


def test_time_reply_uses_injected_clock() -> None:
    generator = ResponseGenerator(clock=lambda: datetime(2024, 3, 9, 15, 5))

    response = generator.generate("can you tell me the time?")

    assert response.intent == "time"
    assert response.text == "It is 3:05 PM."


def test_default_time_reply_starts_with_it_is() -> None:
    assert generate_response("what time is it").text.startswith("It is")


def test_date_reply_spells_out_day() -> None:
    generator = ResponseGenerator(clock=lambda: datetime(2024, 3, 9, 8, 0))

    assert generator.generate("what day is it").text == "Today is Saturday, March 9."


def test_seeded_generator_is_deterministic() -> None:
    first = ResponseGenerator(rng=random.Random(7)).generate("tell me a fun fact")
    second = ResponseGenerator(rng=random.Random(7)).generate("tell me a fun fact")

    assert first == second
    assert first.intent == "fun_fact"


def test_assistant_name_is_configurable() -> None:
    response = ResponseGenerator(assistant_name="Nova").generate("hi")

    assert "Nova" in response.text


def test_combined_reply_appends_non_blank_follow_up() -> None:
    assert AssistantResponse(text="It is noon.", intent="time", follow_up="Stretch?").combined() == "It is noon.\n\nStretch?"
    assert AssistantResponse(text="Bye.", intent="farewell", follow_up=" ").combined() == "Bye."
    assert AssistantResponse(text="Bye.", intent="farewell").combined() == "Bye."
