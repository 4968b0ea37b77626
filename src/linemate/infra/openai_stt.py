"""
OpenAI Speech-to-Text (STT) client.

Design goals:
- No SDK dependency (stdlib urllib + certifi SSL context)
- Async-friendly: the blocking request runs in a worker thread
- Minimal surface area: "transcribe file -> text"
"""

from __future__ import annotations

import asyncio
import json
import mimetypes
import os
import uuid
from dataclasses import dataclass
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from src.linemate.exceptions import NotFoundError, TranscriptionError
from src.linemate.infra.http_ssl import create_ssl_context
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class OpenAITranscriptionResult:
    text: str
    raw: dict


def _guess_mime(filename: str) -> str:
    mt, _ = mimetypes.guess_type(filename)
    return mt or "application/octet-stream"


def _encode_multipart_form(fields: dict, file_field: str, file_path: str) -> tuple[bytes, str]:
    """
    Build multipart/form-data body.
    """
    boundary = f"----lineMateBoundary{uuid.uuid4().hex}"
    parts: list[bytes] = []

    for name, value in fields.items():
        if value is None:
            continue
        parts.append(f"--{boundary}\r\n".encode())
        parts.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
        parts.append(str(value).encode())
        parts.append(b"\r\n")

    filename = os.path.basename(file_path)
    with open(file_path, "rb") as f:
        data = f.read()

    parts.append(f"--{boundary}\r\n".encode())
    parts.append(
        f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'.encode()
    )
    parts.append(f"Content-Type: {_guess_mime(filename)}\r\n\r\n".encode())
    parts.append(data)
    parts.append(b"\r\n")
    parts.append(f"--{boundary}--\r\n".encode())

    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def transcribe_audio_file(
    *,
    file_path: str,
    api_key: str,
    url: str,
    model: str = "whisper-1",
    language: Optional[str] = None,
    timeout: float = 120,
) -> OpenAITranscriptionResult:
    """
    Call OpenAI STT (transcriptions) and return the transcript.

    This is a blocking function (urllib). Call it via asyncio.to_thread(...) from async code.
    """
    fields = {
        "model": model,
        "language": language,
        "response_format": "json",
    }
    body, content_type = _encode_multipart_form(fields, "file", file_path)

    req = Request(
        url,
        data=body,
        method="POST",
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": content_type,
        },
    )

    with urlopen(req, timeout=timeout, context=create_ssl_context()) as resp:
        payload = json.loads(resp.read().decode("utf-8"))

    if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
        raise ValueError(f"Unexpected transcription payload: {payload!r}")

    return OpenAITranscriptionResult(text=payload["text"], raw=payload)


class OpenAITranscriptionClient:
    """
    Long-lived STT client. Holds the API key and the fixed language hint.

    Safe for concurrent use: every call opens its own urllib connection.
    """

    def __init__(
        self,
        *,
        api_key: str,
        url: str,
        model: str = "whisper-1",
        language: Optional[str] = "zh",
        timeout_seconds: float = 120,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is missing (OPENAI_API_KEY)")
        self.api_key = api_key
        self.url = url
        self.model = model
        self.language = language
        self.timeout_seconds = timeout_seconds

    async def transcribe(self, file_path: str) -> str:
        """
        Transcribe `file_path` and return the recognised text as the service sent it.

        Raises NotFoundError if the file does not exist, TranscriptionError on any
        service fault. No retries.
        """
        if not os.path.isfile(file_path):
            raise NotFoundError(file_path)

        logger.info("Transcribing audio file | path=%s | language=%s", file_path, self.language)

        try:
            result = await asyncio.to_thread(
                transcribe_audio_file,
                file_path=file_path,
                api_key=self.api_key,
                url=self.url,
                model=self.model,
                language=self.language,
                timeout=self.timeout_seconds,
            )
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
            logger.error("Transcription rejected | status=%s | detail=%s", exc.code, detail[:500])
            raise TranscriptionError(os.path.basename(file_path), exc) from exc
        except (URLError, HTTPException, OSError, ValueError) as exc:
            logger.error("Transcription failed | path=%s", file_path, exc_info=exc)
            raise TranscriptionError(os.path.basename(file_path), exc) from exc

        logger.info("Transcription completed | path=%s | chars=%s", file_path, len(result.text))
        return result.text
