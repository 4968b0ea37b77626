"""
HTTPS SSL helpers.

urllib on some local Python installs (notably Homebrew Python on macOS) fails with
CERTIFICATE_VERIFY_FAILED, so every outbound urllib call uses certifi's CA bundle.
"""

from __future__ import annotations

import ssl
from functools import lru_cache

import certifi


@lru_cache(maxsize=1)
def create_ssl_context() -> ssl.SSLContext:
    """Return a shared SSLContext backed by certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())
