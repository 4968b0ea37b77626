"""
User-facing reply texts.

Kept in one place so the wording can change without touching dispatch logic.
"""

from __future__ import annotations

TEXT_ERROR_MESSAGE = "❌ 抱歉，儲存訊息時發生錯誤，請稍後再試。"
TEXT_CONFIRM_ERROR_MESSAGE = "⚠️ 訊息已儲存，但傳送確認回覆時發生錯誤。"
AUDIO_PROCESSING_MESSAGE = "🎙️ 已收到語音訊息，正在轉換成文字..."
AUDIO_ERROR_MESSAGE = "❌ 抱歉，語音轉換時發生錯誤，請稍後再試。"
EMPTY_TRANSCRIPT_PLACEHOLDER = "（無法辨識語音內容）"


def text_saved_reply(text: str) -> str:
    return f"✅ 訊息已儲存！\n收到內容：{text}"


def audio_transcribed_reply(transcript: str) -> str:
    body = transcript if transcript.strip() else EMPTY_TRANSCRIPT_PLACEHOLDER
    return f"✅ 語音已轉換並儲存！\n轉換內容：{body}"
