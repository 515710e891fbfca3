"""Image model clients package public API."""

from genstudio.clients.base import BaseImageClient
from genstudio.clients.gemini import GeminiImageClient

__all__ = [
    "BaseImageClient",
    "GeminiImageClient",
]
