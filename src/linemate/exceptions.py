"""Exception taxonomy for the relay.

Every error carries the underlying exception (if any) as `cause`.
"""

from __future__ import annotations


class LineMateError(Exception):
    """Base class for all relay errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class FetchError(LineMateError):
    """Raised when downloading message content from the platform fails."""

    def __init__(self, message_id: str, cause: Exception | None = None):
        self.message_id = message_id
        super().__init__(f"Failed to fetch content for message '{message_id}'", cause)


class NotFoundError(LineMateError):
    """Raised when an expected local resource is missing."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Audio file not found: '{path}'")


class TranscriptionError(LineMateError):
    """Raised when the speech-to-text service fails."""

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        super().__init__(f"Failed to transcribe audio file '{file_name}'", cause)


class SinkError(LineMateError):
    """Raised when appending a record to the spreadsheet fails."""


class ReplyError(LineMateError):
    """Raised when a reply (reply-token delivery) fails or the token is spent."""


class PushError(LineMateError):
    """Raised when a push delivery to a user fails."""

    def __init__(self, user_id: str, cause: Exception | None = None):
        self.user_id = user_id
        super().__init__(f"Failed to push message to user '{user_id}'", cause)


class InvalidPayloadError(LineMateError):
    """Raised when a webhook body cannot be parsed into events."""


class StartupError(LineMateError):
    """Raised when a collaborator cannot be initialised at startup."""
