"""Tests for downloading LINE audio content into the scratch directory."""

from __future__ import annotations

import asyncio
import io
from http.client import IncompleteRead
from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from src.linemate.audio import line_content
from src.linemate.audio.line_content import LineAudioFetcher
from src.linemate.exceptions import FetchError

BASE_URL = "https://api-data.line.me/v2/bot/message"


def _fetcher(temp_store) -> LineAudioFetcher:
    return LineAudioFetcher(temp_store, content_base_url=BASE_URL + "/", timeout_seconds=5)


def test_content_url(temp_store):
    assert _fetcher(temp_store).content_url("M1") == f"{BASE_URL}/M1/content"
    assert _fetcher(temp_store).content_url("a/b") == f"{BASE_URL}/a%2Fb/content"


def test_fetch_streams_body_to_allocated_path(temp_store):
    response = MagicMock()
    response.__enter__.return_value = io.BytesIO(b"m4a-bytes" * 10_000)

    with patch.object(line_content, "urlopen", return_value=response) as urlopen:
        path = asyncio.run(_fetcher(temp_store).fetch("M1", "channel-token"))

    assert Path(path).parent == temp_store.root
    assert Path(path).read_bytes() == b"m4a-bytes" * 10_000
    req = urlopen.call_args.args[0]
    assert req.full_url == f"{BASE_URL}/M1/content"
    assert req.get_header("Authorization") == "Bearer channel-token"
    assert urlopen.call_args.kwargs["timeout"] == 5


def test_rejected_credential_raises_fetch_error(temp_store):
    err = HTTPError(f"{BASE_URL}/M1/content", 401, "Unauthorized", {}, io.BytesIO(b""))
    with patch.object(line_content, "urlopen", side_effect=err):
        with pytest.raises(FetchError) as excinfo:
            asyncio.run(_fetcher(temp_store).fetch("M1", "bad-token"))

    assert excinfo.value.message_id == "M1"
    assert excinfo.value.cause is err


def test_network_fault_raises_fetch_error(temp_store):
    with patch.object(line_content, "urlopen", side_effect=URLError("no route")):
        with pytest.raises(FetchError):
            asyncio.run(_fetcher(temp_store).fetch("M1", "channel-token"))


def test_write_fault_raises_fetch_error(temp_store):
    with patch.object(line_content, "_download_content_blocking", side_effect=OSError("disk full")):
        with pytest.raises(FetchError):
            asyncio.run(_fetcher(temp_store).fetch("M1", "channel-token"))


def test_empty_message_id_raises_fetch_error(temp_store):
    with pytest.raises(FetchError):
        asyncio.run(_fetcher(temp_store).fetch("", "channel-token"))


def test_truncated_body_raises_fetch_error(temp_store):
    body = MagicMock()
    body.read.side_effect = IncompleteRead(b"part", 100)
    response = MagicMock()
    response.__enter__.return_value = body

    with patch.object(line_content, "urlopen", return_value=response):
        with pytest.raises(FetchError) as excinfo:
            asyncio.run(_fetcher(temp_store).fetch("M1", "channel-token"))

    assert isinstance(excinfo.value.cause, IncompleteRead)
