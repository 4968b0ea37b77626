"""
LINE webhook events -> typed inbound events.

Every raw event becomes exactly one of:
- TextMessageEvent
- AudioMessageEvent
- IgnoredEvent (non-message events, and message types we do not relay)

The dispatcher switches on these variants in a single place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from src.linemate.exceptions import InvalidPayloadError, ReplyError


class ReplyToken:
    """
    Single-use reply token.

    `consume()` hands the token out once; any later attempt raises ReplyError
    without touching the network.
    """

    def __init__(self, value: str) -> None:
        self._value = value
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> str:
        if self._consumed:
            raise ReplyError("Reply token already consumed")
        self._consumed = True
        return self._value

    def __repr__(self) -> str:
        return f"ReplyToken(consumed={self._consumed})"


@dataclass(frozen=True)
class TextMessageEvent:
    user_id: str
    reply_token: Optional[ReplyToken]
    timestamp: int
    text: str
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class AudioMessageEvent:
    user_id: str
    reply_token: Optional[ReplyToken]
    timestamp: int
    message_id: str
    duration_ms: Optional[int] = None
    kind: str = field(default="audio", init=False)


@dataclass(frozen=True)
class IgnoredEvent:
    event_type: str
    message_type: Optional[str] = None
    user_id: str = ""
    kind: str = field(default="other", init=False)


InboundEvent = Union[TextMessageEvent, AudioMessageEvent, IgnoredEvent]


def _safe_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_event(raw: Mapping[str, Any]) -> InboundEvent:
    """
    Convert one raw LINE event dict into an inbound event variant.
    """
    event_type = str(raw.get("type") or "")
    source = raw.get("source") or {}
    user_id = str(source.get("userId") or "") if isinstance(source, Mapping) else ""

    if event_type != "message":
        return IgnoredEvent(event_type=event_type, user_id=user_id)

    message = raw.get("message") or {}
    if not isinstance(message, Mapping):
        return IgnoredEvent(event_type=event_type, user_id=user_id)

    message_type = str(message.get("type") or "")
    token_value = raw.get("replyToken")
    reply_token = ReplyToken(str(token_value)) if token_value else None
    timestamp = _safe_int(raw.get("timestamp"))

    if message_type == "text":
        return TextMessageEvent(
            user_id=user_id,
            reply_token=reply_token,
            timestamp=timestamp,
            text=str(message.get("text") or ""),
        )

    if message_type == "audio":
        duration = message.get("duration")
        return AudioMessageEvent(
            user_id=user_id,
            reply_token=reply_token,
            timestamp=timestamp,
            message_id=str(message.get("id") or ""),
            duration_ms=_safe_int(duration) if duration is not None else None,
        )

    return IgnoredEvent(event_type=event_type, message_type=message_type, user_id=user_id)


def parse_events(body: Any) -> List[InboundEvent]:
    """
    Parse a decoded webhook body (`{"destination": ..., "events": [...]}`).

    Raises InvalidPayloadError if the body does not carry an events list.
    """
    if not isinstance(body, Mapping):
        raise InvalidPayloadError("Webhook body is not a JSON object")

    events = body.get("events")
    if not isinstance(events, list):
        raise InvalidPayloadError("Webhook body has no 'events' list")

    parsed: List[InboundEvent] = []
    for raw in events:
        if not isinstance(raw, Mapping):
            raise InvalidPayloadError(f"Webhook event is not an object: {raw!r}")
        parsed.append(parse_event(raw))
    return parsed
