"""
Scratch directory for materialised audio.

Responsibilities:
- Allocate collision-free file paths for concurrent downloads
- Delete files idempotently
- Sweep stale files left behind by crashes or failed downloads
- Own the recurring sweep task (started at app startup, cancelled at shutdown)

NOTE:
- The pipeline deletes its own file on every exit path; the sweep is only a backstop.
"""

from __future__ import annotations

import asyncio
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)

_UNSAFE_HINT_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class TempResourceStore:
    def __init__(self, root_dir: str, *, default_ext: str = ".m4a") -> None:
        self.root = Path(root_dir)
        self.default_ext = default_ext
        self._sweeper: Optional[asyncio.Task] = None

    def ensure_dir(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def allocate(self, hint: str, ext: Optional[str] = None) -> str:
        """
        Return a fresh path under the scratch directory.

        The name combines the sanitised hint, a nanosecond timestamp and a random
        suffix, so parallel callers with the same hint never collide.
        """
        root = self.ensure_dir()
        safe_hint = _UNSAFE_HINT_CHARS.sub("_", hint or "")[:64] or "audio"
        suffix = ext if ext is not None else self.default_ext
        filename = f"audio_{safe_hint}_{time.time_ns()}_{uuid.uuid4().hex[:8]}{suffix}"
        return str(root / filename)

    def delete(self, path: str) -> bool:
        """
        Remove `path`. Missing files are not an error.

        Returns True if a file was removed.
        """
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        logger.info("Temp file deleted | path=%s", path)
        return True

    def sweep(self, max_age_seconds: float) -> int:
        """
        Delete files whose mtime is older than `max_age_seconds`.

        Per-file errors are logged and skipped. Returns the number of files removed.
        """
        if not self.root.is_dir():
            return 0

        cutoff = time.time() - max_age_seconds
        removed = 0
        for entry in os.scandir(self.root):
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                if entry.stat(follow_symlinks=False).st_mtime >= cutoff:
                    continue
                os.remove(entry.path)
                removed += 1
                logger.info("Stale temp file removed | file=%s", entry.name)
            except FileNotFoundError:
                # Already gone (pipeline cleanup or a concurrent sweep).
                continue
            except OSError:
                logger.exception("Failed to remove stale temp file | file=%s", entry.name)

        return removed

    # ------------------------------------------------------------------
    # Recurring sweep
    # ------------------------------------------------------------------

    def start_sweeper(self, *, interval_seconds: float, max_age_seconds: float) -> asyncio.Task:
        if self._sweeper and not self._sweeper.done():
            return self._sweeper

        self.ensure_dir()
        self._sweeper = asyncio.create_task(self._sweep_loop(interval_seconds, max_age_seconds))
        logger.info(
            "Temp sweeper started | dir=%s | interval_s=%s | max_age_s=%s",
            self.root,
            interval_seconds,
            max_age_seconds,
        )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Temp sweeper stopped | dir=%s", self.root)

    async def _sweep_loop(self, interval_seconds: float, max_age_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                removed = await asyncio.to_thread(self.sweep, max_age_seconds)
                if removed:
                    logger.info("Temp sweep finished | removed=%s", removed)
            except Exception as exc:
                logger.error("Temp sweep failed", exc_info=exc)
