from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSTALL_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    # App
    app_env: str = "local"
    app_log_level: str = "INFO"
    port: int = 3000

    # LINE Messaging API
    channel_access_token: str | None = None
    channel_secret: str | None = None

    # LINE – inbound webhook behavior
    line_validate_signature: bool = True

    # Binary content endpoint; the message id and "/content" are appended per request.
    line_content_base_url: str = "https://api-data.line.me/v2/bot/message"

    # Google Sheets
    google_sheet_id: str | None = None
    # Service account JSON, either literal or base64-encoded.
    google_service_account_key: str | None = None
    google_sheet_name: str = "Sheet1"

    # Speech-to-text
    openai_api_key: str | None = None
    openai_transcriptions_url: str = "https://api.openai.com/v1/audio/transcriptions"
    stt_model_name: str = "whisper-1"
    stt_language: str = Field(
        default="zh",
        validation_alias=AliasChoices("STT_LANGUAGE", "WHISPER_LANGUAGE", "stt_language"),
    )
    transcription_timeout_seconds: float = 120.0
    http_timeout_seconds: float = 120.0

    # Scratch directory for downloaded audio
    temp_dir: str = str(_INSTALL_ROOT / "temp")
    temp_sweep_interval_seconds: float = 60 * 60
    temp_max_age_seconds: float = 60 * 60

    # Upper bound on audio pipelines (download + transcription) in flight at once
    audio_max_concurrency: int = 4

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
