"""Custom exception classes for the studio."""

from typing import Optional

from genstudio.utils.constants import (
    EMPTY_RESPONSE_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    TEXT_ONLY_MESSAGE_PREFIX,
)


class MalformedImageError(ValueError):
    """Raised when an encoded image does not have the data URI structure."""

    def __init__(self, message=None, **kwargs):
        if message is None:
            details = ", ".join(f"{k}={v}" for k, v in kwargs.items())
            message = f"Malformed image. {details}" if details else "Malformed image."
        super().__init__(message)
        self.details = kwargs


class FileReadError(OSError):
    """Raised when an uploaded image file cannot be read or identified."""

    def __init__(self, path, reason: Optional[str] = None):
        super().__init__(f"Could not read image file {path}: {reason or 'unknown error'}")
        self.path = path
        self.reason = reason


class RemoteCallFailure(RuntimeError):
    """Any failure of the remote generation call (network, auth, quota, request)."""

    def __init__(self, cause: Optional[BaseException] = None):
        message = str(cause) if cause is not None else ""
        super().__init__(message or GENERIC_FAILURE_MESSAGE)
        self.cause = cause


class NoImageReturned(Exception):
    """The model answered but produced no image part."""


class TextOnlyResponse(NoImageReturned):
    """The model answered with text only."""

    def __init__(self, text: str):
        super().__init__(f"{TEXT_ONLY_MESSAGE_PREFIX}{text}")
        self.text = text


class EmptyResponse(NoImageReturned):
    def __init__(self):
        super().__init__(EMPTY_RESPONSE_MESSAGE)
