from src.linemate.runtime import replies


def test_text_saved_reply_contains_text():
    assert replies.text_saved_reply("hello") == "✅ 訊息已儲存！\n收到內容：hello"


def test_audio_transcribed_reply_contains_transcript():
    assert "測試" in replies.audio_transcribed_reply("測試")


def test_blank_transcript_uses_placeholder():
    assert replies.EMPTY_TRANSCRIPT_PLACEHOLDER in replies.audio_transcribed_reply("  ")
