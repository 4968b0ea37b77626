"""
Event dispatcher (per-request runtime).

Responsibilities:
- Run every event of one webhook delivery concurrently
- Route each event by its variant: text flow, audio flow, or ignore
- Deliver replies/pushes through the LINE sender
- Contain failures per event: one event's fault never aborts its siblings

IMPORTANT:
- The reply token is single-use. The audio flow spends it on the "processing"
  placeholder; everything after that goes out as a push to the user id.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, List, Protocol

from src.linemate.exceptions import PushError, ReplyError
from src.linemate.inputs.line.events import (
    AudioMessageEvent,
    IgnoredEvent,
    InboundEvent,
    TextMessageEvent,
)
from src.linemate.logging.logger import setup_logger
from src.linemate.runtime import replies

logger = setup_logger(__name__)


class RecordSink(Protocol):
    async def append(self, *, kind: str, text: str, user_id: str, timestamp: int) -> Any: ...


class AudioProcessor(Protocol):
    async def process(self, message_id: str, access_token: str) -> str: ...


class MessageSender(Protocol):
    def reply_text(self, *, reply_token: str, text: str) -> None: ...

    def push_text(self, *, to: str, text: str) -> None: ...


class EventDispatcher:
    def __init__(
        self,
        *,
        sink: RecordSink,
        audio_pipeline: AudioProcessor,
        sender: MessageSender,
        channel_access_token: str,
    ) -> None:
        self.sink = sink
        self.audio_pipeline = audio_pipeline
        self.sender = sender
        self.channel_access_token = channel_access_token

    async def handle_events(self, events: Iterable[InboundEvent]) -> None:
        """
        Handle all events of one delivery concurrently and wait for all of them.
        """
        tasks: List[asyncio.Task] = [asyncio.create_task(self._handle_safely(e)) for e in events]
        if tasks:
            await asyncio.gather(*tasks)

    async def _handle_safely(self, event: InboundEvent) -> None:
        try:
            await self.handle_event(event)
        except Exception as exc:
            logger.error("Unhandled error while handling event | event=%s", event, exc_info=exc)

    async def handle_event(self, event: InboundEvent) -> None:
        if isinstance(event, TextMessageEvent):
            await self._handle_text(event)
        elif isinstance(event, AudioMessageEvent):
            await self._handle_audio(event)
        elif isinstance(event, IgnoredEvent):
            logger.info(
                "Ignoring event | type=%s | message_type=%s | user_id=%s",
                event.event_type,
                event.message_type,
                event.user_id,
            )
        else:
            raise TypeError(f"Unsupported event variant: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Text flow
    # ------------------------------------------------------------------

    async def _handle_text(self, event: TextMessageEvent) -> None:
        logger.info("Text message received | user_id=%s | chars=%s", event.user_id, len(event.text))
        try:
            await self.sink.append(
                kind="text",
                text=event.text,
                user_id=event.user_id,
                timestamp=event.timestamp,
            )
        except Exception as exc:
            logger.error("Error processing text message | user_id=%s", event.user_id, exc_info=exc)
            await self._notify_error(event, replies.TEXT_ERROR_MESSAGE)
            return

        try:
            await self._reply(event, replies.text_saved_reply(event.text))
        except Exception as exc:
            logger.error("Message saved but confirmation failed | user_id=%s", event.user_id, exc_info=exc)
            await self._notify_error(event, replies.TEXT_CONFIRM_ERROR_MESSAGE)
            return
        logger.info("Message saved and replied | user_id=%s", event.user_id)

    # ------------------------------------------------------------------
    # Audio flow
    # ------------------------------------------------------------------

    async def _handle_audio(self, event: AudioMessageEvent) -> None:
        logger.info(
            "Audio message received | user_id=%s | message_id=%s | duration_ms=%s",
            event.user_id,
            event.message_id,
            event.duration_ms,
        )

        # Feedback first; the push channel below does not depend on this succeeding.
        try:
            await self._reply(event, replies.AUDIO_PROCESSING_MESSAGE)
        except Exception as exc:
            logger.error("Failed to send processing reply | user_id=%s", event.user_id, exc_info=exc)

        try:
            transcript = await self.audio_pipeline.process(event.message_id, self.channel_access_token)
            await self.sink.append(
                kind="audio",
                text=transcript,
                user_id=event.user_id,
                timestamp=event.timestamp,
            )
            await self._push(event.user_id, replies.audio_transcribed_reply(transcript))
            logger.info("Audio transcribed, saved and pushed | user_id=%s", event.user_id)
        except Exception as exc:
            logger.error(
                "Error processing audio message | user_id=%s | message_id=%s",
                event.user_id,
                event.message_id,
                exc_info=exc,
            )
            await self._notify_error(event, replies.AUDIO_ERROR_MESSAGE)

    # ------------------------------------------------------------------
    # Delivery helpers
    # ------------------------------------------------------------------

    async def _reply(self, event: TextMessageEvent | AudioMessageEvent, text: str) -> None:
        if event.reply_token is None:
            raise ReplyError("Event has no reply token")
        token = event.reply_token.consume()
        await asyncio.to_thread(self.sender.reply_text, reply_token=token, text=text)

    async def _push(self, user_id: str, text: str) -> None:
        if not user_id:
            raise PushError(user_id, ValueError("Event has no user id"))
        await asyncio.to_thread(self.sender.push_text, to=user_id, text=text)

    async def _notify_error(self, event: TextMessageEvent | AudioMessageEvent, text: str) -> None:
        """
        Best-effort error notification: reply if the token is still unspent, else push.
        Delivery failures are logged only.
        """
        try:
            if event.reply_token is not None and not event.reply_token.consumed:
                await self._reply(event, text)
            else:
                await self._push(event.user_id, text)
        except Exception as exc:
            logger.error("Failed to send error notification | user_id=%s", event.user_id, exc_info=exc)
