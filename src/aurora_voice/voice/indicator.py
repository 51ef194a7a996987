"""User-facing labels for the current speech status."""

from __future__ import annotations

from dataclasses import dataclass

from aurora_voice.models import RecognitionErrorCode, SpeechStatus


@dataclass(slots=True, frozen=True)
class StatusIndicator:
    label: str
    detail: str


_INDICATORS: dict[SpeechStatus, StatusIndicator] = {
    SpeechStatus.IDLE: StatusIndicator("Ready", "Press Enter or type to start."),
    SpeechStatus.LISTENING: StatusIndicator("Listening...", "Speak naturally. I will pause when you stop."),
    SpeechStatus.PROCESSING: StatusIndicator("Thinking...", "Reflecting on what I just heard."),
    SpeechStatus.SPEAKING: StatusIndicator("Speaking...", "Sharing my response."),
    SpeechStatus.UNSUPPORTED: StatusIndicator(
        "Voice unavailable", "This device does not offer speech recognition. Type instead."
    ),
    SpeechStatus.ERROR: StatusIndicator("Something went wrong", "Try again or type your request."),
}


def describe_status(
    status: SpeechStatus,
    error: str | None = None,
    error_code: RecognitionErrorCode | None = None,
) -> StatusIndicator:
    """Pick the indicator text; a recorded error wins over the raw status.

    Only errors carrying a recognition code are shown as microphone errors.
    """
    if error and error_code is not None:
        return StatusIndicator("Microphone error", error)
    if error:
        return StatusIndicator(_INDICATORS[SpeechStatus.ERROR].label, error)
    return _INDICATORS[status]
