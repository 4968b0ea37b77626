"""
Audio domain package.

This centralizes:
- the scratch directory for downloaded audio (TempResourceStore)
- LINE audio content download (LineAudioFetcher)
- download -> transcribe -> cleanup orchestration (AudioPipeline)
"""

from __future__ import annotations

from src.linemate.audio.line_content import LineAudioFetcher
from src.linemate.audio.pipeline import AudioPipeline
from src.linemate.audio.temp_store import TempResourceStore

__all__ = [
    "AudioPipeline",
    "LineAudioFetcher",
    "TempResourceStore",
]
