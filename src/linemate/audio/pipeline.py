"""
LINE audio message -> OpenAI STT -> transcript.

Order within one run: fetch -> transcribe -> cleanup -> return/raise.
The downloaded file is deleted on every exit path; cleanup failures are logged
and never replace the run's own outcome.

A transcription that times out keeps its concurrency slot until the worker call
returns, so at most `max_concurrency` uploads are ever in flight.
"""

from __future__ import annotations

import asyncio
import os
from typing import Optional, Protocol

from src.linemate.audio.temp_store import TempResourceStore
from src.linemate.exceptions import TranscriptionError
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)


class AudioFetcher(Protocol):
    async def fetch(self, message_id: str, access_token: str) -> str: ...


class Transcriber(Protocol):
    async def transcribe(self, file_path: str) -> str: ...


class _Slot:
    """One unit of the pipeline concurrency bound, released exactly once."""

    def __init__(self, semaphore: asyncio.Semaphore) -> None:
        self._semaphore = semaphore
        self._released = False
        self._detached = False

    def _release(self) -> None:
        if not self._released:
            self._released = True
            self._semaphore.release()

    def release(self) -> None:
        if not self._detached:
            self._release()

    def release_when_done(self, task: asyncio.Future) -> None:
        # The worker thread behind a timed-out transcription keeps running.
        self._detached = True

        def _done(t: asyncio.Future) -> None:
            if not t.cancelled() and t.exception() is not None:
                logger.info("Late transcription failure after timeout | error=%s", t.exception())
            self._release()

        task.add_done_callback(_done)


class AudioPipeline:
    def __init__(
        self,
        *,
        fetcher: AudioFetcher,
        transcriber: Transcriber,
        temp_store: TempResourceStore,
        transcription_timeout_seconds: Optional[float] = 120.0,
        max_concurrency: int = 4,
    ) -> None:
        self.fetcher = fetcher
        self.transcriber = transcriber
        self.temp_store = temp_store
        self.transcription_timeout_seconds = transcription_timeout_seconds
        self.semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def process(self, message_id: str, access_token: str) -> str:
        await self.semaphore.acquire()
        slot = _Slot(self.semaphore)
        try:
            return await self._process(message_id, access_token, slot)
        finally:
            slot.release()

    async def _process(self, message_id: str, access_token: str, slot: _Slot) -> str:
        logger.info("Processing audio message | message_id=%s", message_id)

        # FetchError propagates as-is: there is no path to clean up.
        audio_path = await self.fetcher.fetch(message_id, access_token)
        try:
            text = await self._transcribe(audio_path, slot)
        finally:
            self._cleanup(audio_path)

        logger.info("Audio message processed | message_id=%s | chars=%s", message_id, len(text))
        return text

    async def _transcribe(self, audio_path: str, slot: _Slot) -> str:
        if not self.transcription_timeout_seconds:
            return await self.transcriber.transcribe(audio_path)

        task = asyncio.ensure_future(self.transcriber.transcribe(audio_path))
        try:
            return await asyncio.wait_for(
                asyncio.shield(task),
                timeout=self.transcription_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Transcription timed out | path=%s | timeout_s=%s",
                audio_path,
                self.transcription_timeout_seconds,
            )
            # The slot stays taken until the abandoned call returns.
            slot.release_when_done(task)
            raise TranscriptionError(os.path.basename(audio_path), exc) from exc
        except asyncio.CancelledError:
            task.cancel()
            raise

    def _cleanup(self, audio_path: str) -> None:
        try:
            self.temp_store.delete(audio_path)
        except Exception as exc:
            logger.error("Failed to clean up temp file | path=%s", audio_path, exc_info=exc)
