import os
from typing import Any

from google.genai.client import Client
from google.genai.types import Part
from loguru import logger

from genstudio.clients.base import BaseImageClient
from genstudio.utils.aliases import ContentPart, InlineImagePart, TextPart
from genstudio.utils.constants import DEFAULT_MODEL_NAME


class GeminiImageClient(BaseImageClient):
    """Gemini client calling the Google GenAI API for image generation and editing."""

    def __init__(self, *, model_name: str = DEFAULT_MODEL_NAME, api_key: str | None = None):
        # A missing key is not checked here; the first call fails instead.
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self.model_name = model_name
        self._client: Client | None = None
        logger.info(f"Using Gemini model {self.model_name}")

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(api_key=self.api_key)
        return self._client

    @staticmethod
    def to_sdk_part(part: ContentPart) -> Part:
        if isinstance(part, InlineImagePart):
            return Part.from_bytes(data=part.data, mime_type=part.mime_type)
        if isinstance(part, TextPart):
            return Part.from_text(text=part.text)
        raise TypeError(f"Unsupported content part: {type(part)}")

    async def _generate_from_parts(self, parts: list[ContentPart]) -> Any:
        contents = [self.to_sdk_part(p) for p in parts]
        logger.debug(f"Contents length: {len(contents)} parts")
        return await self.client.aio.models.generate_content(model=self.model_name, contents=contents)
