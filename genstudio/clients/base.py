"""Base image model client abstraction."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from genstudio.request_builder import to_content_parts
from genstudio.utils.aliases import ContentPart
from genstudio.utils.constants import N_DEBUG_PROMPT_CHARS
from genstudio.utils.data_types import GenerationRequest


class BaseImageClient(ABC):
    """Abstract base class for image generation clients.

    Subclasses implement ``_generate_from_parts`` and return the provider's raw
    response; interpreting it is left to ``genstudio.response_interpreter``.
    Failures propagate unchanged, there is no retry at this level.
    """

    model_name: str

    async def generate(self, request: GenerationRequest) -> Any:
        """Send one generation or edit request to the model.

        Args:
            request: Prompt text plus optional source image.
        Returns:
            The raw provider response.
        """
        parts = to_content_parts(request)
        mode = "edit" if request.is_edit else "generate"
        logger.info(f"Calling {self.model_name} ({mode}, {len(parts)} parts)")
        logger.debug(f"Prompt (truncated {N_DEBUG_PROMPT_CHARS} chars): {request.prompt_text[:N_DEBUG_PROMPT_CHARS]}")
        return await self._generate_from_parts(parts)

    @abstractmethod
    async def _generate_from_parts(self, parts: list[ContentPart]) -> Any:  # pragma: no cover - interface only
        """Transform provider-agnostic content parts into a provider call."""
        raise NotImplementedError
