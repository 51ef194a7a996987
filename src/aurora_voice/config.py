"""Runtime configuration for Aurora Voice."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GREETING = (
    "Hi, I'm Aurora. Press Enter to talk or type to begin. I can help with quick check-ins, "
    "reflective prompts, and a bit of motivation."
)


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="AURORA_", env_file=".env", extra="ignore")

    app_name: str = "aurora-voice"
    log_level: str = "WARNING"
    language: str = Field(default="en-US", description="BCP-47 tag passed to the recognizer.")
    assistant_name: str = "Aurora"
    greeting: str = DEFAULT_GREETING
    thinking_delay_seconds: float = Field(
        default=0.35,
        ge=0.0,
        le=10.0,
        description="Pause before the assistant replies, smoothing turn-taking.",
    )
    speech_pitch: float = Field(default=1.05, ge=0.0, le=2.0)
    speech_rate: float = Field(default=1.0, gt=0.0, le=10.0)
    speech_volume: float = Field(default=1.0, ge=0.0, le=1.0)
    phrase_time_limit: float = Field(default=8.0, gt=0.0, description="Per-utterance capture limit in seconds.")
    listen_timeout: float | None = Field(default=5.0, description="Seconds to wait for speech to begin.")
    ambient_noise_seconds: float = Field(default=0.2, ge=0.0)


settings = Settings()
