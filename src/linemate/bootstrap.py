"""
Service bootstrap (one-time per process).

Responsibilities:
- Validate required configuration
- Authenticate the Google Sheets sink ONCE
- Build the STT client, temp store, audio fetcher, pipeline and LINE sender
- Wire them into the event dispatcher

Any failure here is a StartupError; the entrypoint turns it into exit code 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from src.linemate.audio.line_content import LineAudioFetcher
from src.linemate.audio.pipeline import AudioPipeline
from src.linemate.audio.temp_store import TempResourceStore
from src.linemate.config.settings import Settings
from src.linemate.dispatchers.channels.line_sender import LineSender
from src.linemate.dispatchers.event_dispatcher import EventDispatcher
from src.linemate.exceptions import StartupError
from src.linemate.infra.google_sheets import GoogleSheetsRecordSink
from src.linemate.infra.openai_stt import OpenAITranscriptionClient
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class Services:
    settings: Settings
    temp_store: TempResourceStore
    dispatcher: EventDispatcher
    sink: Any = None


def _missing_settings(settings: Settings) -> List[str]:
    required = {
        "CHANNEL_ACCESS_TOKEN": settings.channel_access_token,
        "GOOGLE_SHEET_ID": settings.google_sheet_id,
        "GOOGLE_SERVICE_ACCOUNT_KEY": settings.google_service_account_key,
        "OPENAI_API_KEY": settings.openai_api_key,
    }
    if settings.line_validate_signature:
        required["CHANNEL_SECRET"] = settings.channel_secret
    return [name for name, value in required.items() if not value]


def build_services(settings: Settings) -> Services:
    missing = _missing_settings(settings)
    if missing:
        raise StartupError(f"Missing required configuration: {', '.join(missing)}")

    try:
        sink = GoogleSheetsRecordSink(
            spreadsheet_id=settings.google_sheet_id,
            service_account_key=settings.google_service_account_key,
            sheet_name=settings.google_sheet_name,
        )
        sink.initialize()

        transcriber = OpenAITranscriptionClient(
            api_key=settings.openai_api_key,
            url=settings.openai_transcriptions_url,
            model=settings.stt_model_name,
            language=settings.stt_language,
            timeout_seconds=settings.http_timeout_seconds,
        )

        temp_store = TempResourceStore(settings.temp_dir)
        temp_store.ensure_dir()

        fetcher = LineAudioFetcher(
            temp_store,
            content_base_url=settings.line_content_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
        pipeline = AudioPipeline(
            fetcher=fetcher,
            transcriber=transcriber,
            temp_store=temp_store,
            transcription_timeout_seconds=settings.transcription_timeout_seconds,
            max_concurrency=settings.audio_max_concurrency,
        )
        sender = LineSender(channel_access_token=settings.channel_access_token)
    except StartupError:
        raise
    except Exception as exc:
        raise StartupError(f"Failed to initialize services: {exc}", exc) from exc

    dispatcher = EventDispatcher(
        sink=sink,
        audio_pipeline=pipeline,
        sender=sender,
        channel_access_token=settings.channel_access_token,
    )

    logger.info(
        "Services initialized | env=%s | temp_dir=%s | stt_model=%s | stt_language=%s",
        settings.app_env,
        settings.temp_dir,
        settings.stt_model_name,
        settings.stt_language,
    )
    return Services(settings=settings, temp_store=temp_store, dispatcher=dispatcher, sink=sink)
