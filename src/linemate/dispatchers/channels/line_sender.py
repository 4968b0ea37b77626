"""
LINE Messaging API sender.

Responsibilities:
- Reply to an event with its (single-use) reply token
- Push messages to a user id (repeatable, independent of any token)
- Keep channel-specific logic isolated from the dispatcher

NOTE:
- The SDK client is synchronous; callers run these methods via asyncio.to_thread.
"""

from __future__ import annotations

from linebot.v3.messaging import (
    ApiClient,
    Configuration,
    MessagingApi,
    PushMessageRequest,
    ReplyMessageRequest,
    TextMessage,
)

from src.linemate.exceptions import PushError, ReplyError
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)

# LINE rejects text messages longer than this.
MAX_TEXT_CHARS = 5000


def _clip(text: str) -> str:
    if len(text) <= MAX_TEXT_CHARS:
        return text
    return text[: MAX_TEXT_CHARS - 1] + "…"


class LineSender:
    def __init__(self, *, channel_access_token: str) -> None:
        if not channel_access_token:
            raise ValueError("LineSender: channel_access_token is missing")

        self._api_client = ApiClient(Configuration(access_token=channel_access_token))
        self._api = MessagingApi(self._api_client)

    def reply_text(self, *, reply_token: str, text: str) -> None:
        """
        Reply to an inbound event. The token is single-use and expires quickly.
        """
        if not reply_token or not text:
            raise ReplyError("LineSender: 'reply_token' and 'text' are required")

        try:
            self._api.reply_message(
                ReplyMessageRequest(reply_token=reply_token, messages=[TextMessage(text=_clip(text))])
            )
        except Exception as exc:
            raise ReplyError("LINE reply failed", exc) from exc

        logger.info("LINE reply sent | chars=%s", len(text))

    def push_text(self, *, to: str, text: str) -> None:
        """
        Push a message to a user id.
        """
        if not to or not text:
            raise PushError(to, ValueError("'to' and 'text' are required"))

        try:
            self._api.push_message(PushMessageRequest(to=to, messages=[TextMessage(text=_clip(text))]))
        except Exception as exc:
            raise PushError(to, exc) from exc

        logger.info("LINE push sent | to=%s | chars=%s", to, len(text))
