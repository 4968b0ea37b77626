"""Tests for the LINE sender (the Messaging API client is mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.linemate.dispatchers.channels.line_sender import MAX_TEXT_CHARS, LineSender
from src.linemate.exceptions import PushError, ReplyError


@pytest.fixture
def sender():
    s = LineSender(channel_access_token="channel-token")
    s._api = MagicMock()
    return s


def test_requires_access_token():
    with pytest.raises(ValueError):
        LineSender(channel_access_token="")


def test_reply_text(sender):
    sender.reply_text(reply_token="R1", text="hello")

    request = sender._api.reply_message.call_args.args[0]
    assert request.reply_token == "R1"
    assert [m.text for m in request.messages] == ["hello"]


def test_push_text(sender):
    sender.push_text(to="U2", text="測試")

    request = sender._api.push_message.call_args.args[0]
    assert request.to == "U2"
    assert [m.text for m in request.messages] == ["測試"]


def test_long_text_is_clipped(sender):
    sender.push_text(to="U2", text="x" * (MAX_TEXT_CHARS + 10))

    text = sender._api.push_message.call_args.args[0].messages[0].text
    assert len(text) == MAX_TEXT_CHARS
    assert text.endswith("…")


def test_reply_failure_raises_reply_error(sender):
    sender._api.reply_message.side_effect = RuntimeError("Invalid reply token")
    with pytest.raises(ReplyError) as excinfo:
        sender.reply_text(reply_token="R1", text="hello")
    assert isinstance(excinfo.value.cause, RuntimeError)


def test_push_failure_raises_push_error(sender):
    sender._api.push_message.side_effect = RuntimeError("429")
    with pytest.raises(PushError) as excinfo:
        sender.push_text(to="U2", text="hello")
    assert excinfo.value.user_id == "U2"


def test_reply_requires_token_and_text(sender):
    with pytest.raises(ReplyError):
        sender.reply_text(reply_token="", text="hello")
    sender._api.reply_message.assert_not_called()


def test_push_requires_recipient(sender):
    with pytest.raises(PushError):
        sender.push_text(to="", text="hello")
    sender._api.push_message.assert_not_called()
