"""
LINE message content -> local audio file.

Downloads the binary body of an audio message from the LINE content endpoint
(bearer-authenticated) and streams it into a path allocated by the temp store.

NOTE:
- Blocking urllib I/O runs in a worker thread (asyncio.to_thread).
- On failure the partially-written file is left for the retention sweep; the caller
  never receives its path.
"""

from __future__ import annotations

import asyncio
import shutil
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from src.linemate.audio.temp_store import TempResourceStore
from src.linemate.exceptions import FetchError
from src.linemate.infra.http_ssl import create_ssl_context
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)

_CHUNK_SIZE = 64 * 1024


def _download_content_blocking(
    *,
    url: str,
    dst_path: str,
    access_token: str,
    timeout: float,
) -> int:
    req = Request(
        url,
        method="GET",
        headers={"Authorization": f"Bearer {access_token}"},
    )
    ssl_ctx = create_ssl_context()
    with urlopen(req, timeout=timeout, context=ssl_ctx) as resp:
        with open(dst_path, "wb") as f:
            shutil.copyfileobj(resp, f, _CHUNK_SIZE)
            f.flush()
            return f.tell()


class LineAudioFetcher:
    def __init__(
        self,
        temp_store: TempResourceStore,
        *,
        content_base_url: str,
        timeout_seconds: float = 120.0,
    ) -> None:
        self.temp_store = temp_store
        self.content_base_url = content_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def content_url(self, message_id: str) -> str:
        return f"{self.content_base_url}/{quote(message_id, safe='')}/content"

    async def fetch(self, message_id: str, access_token: str) -> str:
        """
        Download the content of `message_id` and return the local file path.

        The path is returned only after the body has been fully written and closed.
        """
        if not message_id:
            raise FetchError(message_id, ValueError("message id is empty"))

        dst_path = self.temp_store.allocate(message_id)
        logger.info("Downloading audio content | message_id=%s | path=%s", message_id, dst_path)

        try:
            size = await asyncio.to_thread(
                _download_content_blocking,
                url=self.content_url(message_id),
                dst_path=dst_path,
                access_token=access_token,
                timeout=self.timeout_seconds,
            )
        except HTTPError as exc:
            logger.error(
                "Audio content request rejected | message_id=%s | status=%s",
                message_id,
                exc.code,
            )
            raise FetchError(message_id, exc) from exc
        except (URLError, HTTPException, OSError) as exc:
            logger.error("Audio content download failed | message_id=%s", message_id, exc_info=exc)
            raise FetchError(message_id, exc) from exc

        logger.info("Audio content downloaded | message_id=%s | bytes=%s", message_id, size)
        return dst_path
