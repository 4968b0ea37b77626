"""
Google Sheets record sink.

Responsibilities:
- Authenticate ONCE with a service account at startup
- Append (timestamp, user_id, kind, text) rows to the configured sheet

NOTE:
- googleapiclient's default transport (httplib2) is not thread-safe, so appends are
  serialised with an asyncio.Lock before they enter the worker thread.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from src.linemate.exceptions import SinkError
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def format_timestamp(timestamp_ms: int) -> str:
    """
    Platform epoch milliseconds -> ISO 8601 UTC with millisecond precision.

    1700000000000 -> "2023-11-14T22:13:20.000Z"
    """
    seconds, millis = divmod(int(timestamp_ms), 1000)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{millis:03d}Z"


def parse_service_account_key(raw: str) -> Dict[str, Any]:
    """
    Accept the service account key as literal JSON or base64-encoded JSON.
    """
    value = (raw or "").strip()
    if not value:
        raise ValueError("Google service account key is missing (GOOGLE_SERVICE_ACCOUNT_KEY)")

    if not value.startswith("{"):
        try:
            value = base64.b64decode(value, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("Google service account key is neither JSON nor base64 JSON") from exc

    info = json.loads(value)
    if not isinstance(info, dict) or "client_email" not in info or "private_key" not in info:
        raise ValueError("Google service account key is missing client_email/private_key")
    return info


class GoogleSheetsRecordSink:
    def __init__(
        self,
        *,
        spreadsheet_id: str,
        service_account_key: str,
        sheet_name: str = "Sheet1",
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.service_account_key = service_account_key
        self.sheet_name = sheet_name
        self._sheets: Optional[Any] = None
        self._lock = asyncio.Lock()

    @property
    def range(self) -> str:
        return f"{self.sheet_name}!A:D"

    def initialize(self) -> None:
        """
        Build the authenticated Sheets resource. Called once at startup.
        """
        if self._sheets is not None:
            return
        if not self.spreadsheet_id:
            raise SinkError("Google Sheet id is missing (GOOGLE_SHEET_ID)")

        try:
            info = parse_service_account_key(self.service_account_key)
            credentials = service_account.Credentials.from_service_account_info(
                info, scopes=SHEETS_SCOPES
            )
            self._sheets = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        except Exception as exc:
            logger.error("Failed to initialize Google Sheets client", exc_info=exc)
            raise SinkError("Failed to initialize Google Sheets client", exc) from exc

        logger.info("Google Sheets client initialized | spreadsheet_id=%s", self.spreadsheet_id)

    async def append(self, *, kind: str, text: str, user_id: str, timestamp: int) -> Dict[str, Any]:
        if self._sheets is None:
            raise SinkError("Google Sheets client is not initialized")

        row = [format_timestamp(timestamp), user_id, kind, text]
        async with self._lock:
            try:
                response = await asyncio.to_thread(self._append_blocking, row)
            except Exception as exc:
                logger.error("Failed to append record | user_id=%s | kind=%s", user_id, kind, exc_info=exc)
                raise SinkError("Failed to append record to Google Sheets", exc) from exc

        logger.info(
            "Record appended | user_id=%s | kind=%s | range=%s",
            user_id,
            kind,
            (response.get("updates") or {}).get("updatedRange"),
        )
        return response

    def _append_blocking(self, row: list) -> Dict[str, Any]:
        request = self._sheets.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=self.range,
            valueInputOption="RAW",
            body={"values": [row]},
        )
        return request.execute()
