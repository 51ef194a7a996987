"""CLI startup entrypoint for Aurora Voice."""

from __future__ import annotations

import asyncio

import typer
from rich import print
from rich.markup import escape

from aurora_voice.config import settings
from aurora_voice.models import Message, MessageRole, SpeechStatus
from aurora_voice.responses import ResponseGenerator
from aurora_voice.telemetry.logging import configure_logging
from aurora_voice.voice import PlatformCapabilities, SpeechEngine, TurnOrchestrator, VoiceOutputConfig

app = typer.Typer(help="Aurora voice assistant entrypoint")

_EXIT_PHRASES = ("goodbye", "good bye", "stop listening", "quit", "exit")
_BUSY_STATUSES = (SpeechStatus.LISTENING, SpeechStatus.PROCESSING, SpeechStatus.SPEAKING)


def _build_engine(platform: PlatformCapabilities, language: str | None = None) -> SpeechEngine:
    return SpeechEngine(
        platform,
        language=language or settings.language,
        voice=VoiceOutputConfig(
            pitch=settings.speech_pitch,
            rate=settings.speech_rate,
            volume=settings.speech_volume,
        ),
    )


def _build_orchestrator(engine: SpeechEngine) -> TurnOrchestrator:
    generator = ResponseGenerator(assistant_name=settings.assistant_name)
    return TurnOrchestrator(
        engine,
        respond=generator.generate,
        greeting=settings.greeting,
        thinking_delay_seconds=settings.thinking_delay_seconds,
    )


def _wants_exit(text: str) -> bool:
    lowered = text.strip().lower()
    return any(phrase in lowered for phrase in _EXIT_PHRASES)


def _print_message(message: Message) -> None:
    speaker = "You" if message.role == MessageRole.USER else settings.assistant_name
    print(f"[bold]{speaker}[/bold]: {escape(message.content)}")


async def _wait_for_turn(orchestrator: TurnOrchestrator, poll_seconds: float = 0.1) -> None:
    """Block until a listening turn has started and then fully settled."""
    started = False
    while True:
        await asyncio.sleep(poll_seconds)
        if orchestrator.status in _BUSY_STATUSES or orchestrator.turn_active:
            started = True
        elif started or orchestrator.status == SpeechStatus.ERROR:
            return


@app.callback()
def main(log_level: str = typer.Option(None, help="Override AURORA_LOG_LEVEL")) -> None:
    configure_logging(log_level or settings.log_level)


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "assistant_name": settings.assistant_name,
            "language": settings.language,
            "thinking_delay_seconds": settings.thinking_delay_seconds,
            "speech_pitch": settings.speech_pitch,
            "speech_rate": settings.speech_rate,
        }
    )


@app.command()
def ask(text: str) -> None:
    """Print the assistant's reply to a single utterance."""
    response = ResponseGenerator(assistant_name=settings.assistant_name).generate(text)
    print({"intent": response.intent, "text": response.text, "follow_up": response.follow_up})


@app.command()
def chat(speak: bool = typer.Option(False, help="Speak replies with the local TTS backend")) -> None:
    """Run a typed conversation through the turn orchestrator."""
    synthesizer = None
    if speak:
        try:
            from aurora_voice.voice.tts_pyttsx3 import Pyttsx3SynthesisDevice

            synthesizer = Pyttsx3SynthesisDevice()
        except RuntimeError as exc:
            print({"error": str(exc)})
            raise typer.Exit(code=1)

    async def _run() -> None:
        with _build_engine(PlatformCapabilities(synthesizer=synthesizer)) as engine:
            orchestrator = _build_orchestrator(engine)
            _print_message(orchestrator.messages[0])
            while True:
                try:
                    line = await asyncio.to_thread(input, "You> ")
                except EOFError:
                    break
                if not line.strip():
                    continue

                reply = await orchestrator.submit_text(line)
                if reply is None:
                    print({"error": orchestrator.error})
                else:
                    _print_message(reply)
                if _wants_exit(line):
                    break

    asyncio.run(_run())
    print({"chat": "stopped"})


@app.command("voice-chat")
def voice_chat(
    language: str = typer.Option(None, help="Recognition language tag, e.g. en-US"),
    phrase_time_limit: float = typer.Option(None, help="Per-utterance capture limit in seconds"),
) -> None:
    """Run an interactive voice loop with local STT/TTS backends."""
    try:
        from aurora_voice.voice.stt_speechrecognition import SpeechRecognitionDevice
        from aurora_voice.voice.tts_pyttsx3 import Pyttsx3SynthesisDevice
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'aurora-voice[voice]'"})
        raise typer.Exit(code=1)

    try:
        recognizer = SpeechRecognitionDevice(
            phrase_time_limit=phrase_time_limit or settings.phrase_time_limit,
            timeout=settings.listen_timeout,
            adjust_noise_seconds=settings.ambient_noise_seconds,
        )
        synthesizer = Pyttsx3SynthesisDevice()
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    platform = PlatformCapabilities(recognition_factory=lambda: recognizer, synthesizer=synthesizer)

    async def _run() -> None:
        with _build_engine(platform, language=language) as engine:
            orchestrator = _build_orchestrator(engine)
            engine.subscribe(lambda status, error: print({"status": status.value, "error": error}))
            print({"voice_chat": "started", "hint": "Press Enter to talk; say 'goodbye' to exit."})
            _print_message(orchestrator.messages[0])

            while True:
                await asyncio.to_thread(input, "Press Enter to talk (Ctrl+C to quit) ...")
                seen = len(orchestrator.messages)
                if not orchestrator.toggle_listening():
                    indicator = orchestrator.indicator
                    print({"voice_chat": "not listening", "state": indicator.label, "detail": indicator.detail})
                    continue

                await _wait_for_turn(orchestrator)
                new_messages = orchestrator.messages[seen:]
                for message in new_messages:
                    _print_message(message)
                if any(m.role == MessageRole.USER and _wants_exit(m.content) for m in new_messages):
                    break

    try:
        asyncio.run(_run())
    except (KeyboardInterrupt, EOFError):
        pass
    print({"voice_chat": "stopped"})


if __name__ == "__main__":
    app()
