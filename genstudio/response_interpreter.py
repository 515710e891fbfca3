"""Translate raw SDK responses and classify them into generation outcomes.

The remote SDK returns loosely-typed objects (``candidates[0].content.parts``
with ``inline_data``/``text`` fields, plus a lazily computed aggregate
``text``). ``to_model_response`` is the only place that looks at that shape;
everything downstream works on :class:`ModelResponse`.
"""

from typing import Any

from loguru import logger

from genstudio.utils.aliases import ContentPart, InlineImagePart, TextPart
from genstudio.utils.data_types import Empty, GenerationOutcome, ImageProduced, ModelResponse, TextOnly
from genstudio.utils.images import encode_from_wire


def _first_candidate_parts(raw: Any) -> list[Any]:
    candidates = getattr(raw, "candidates", None)
    if not candidates:
        return []
    try:
        content = getattr(candidates[0], "content", None)
    except (IndexError, KeyError, TypeError):
        return []
    parts = getattr(content, "parts", None)
    if not parts:
        return []
    try:
        return list(parts)
    except TypeError:
        return []


def _translate_part(part: Any) -> ContentPart | None:
    inline = getattr(part, "inline_data", None)
    data = getattr(inline, "data", None) if inline is not None else None
    if isinstance(data, (bytes, bytearray)):
        return InlineImagePart(data=bytes(data), mime_type=getattr(inline, "mime_type", None) or "")
    text = getattr(part, "text", None)
    if isinstance(text, str):
        return TextPart(text)
    return None


def _aggregate_text(raw: Any) -> str | None:
    if isinstance(raw, ModelResponse):
        return raw.text
    try:
        text = getattr(raw, "text", None)
    except (ValueError, AttributeError, TypeError) as exc:
        logger.debug(f"Response has no aggregate text: {exc}")
        return None
    return text if isinstance(text, str) else None


def to_model_response(raw: Any) -> ModelResponse:
    """Translate an SDK response (or anything shaped like one) into a ModelResponse.

    Missing structure at any level yields an empty part list.
    """
    if isinstance(raw, ModelResponse):
        return raw
    parts = [p for p in (_translate_part(part) for part in _first_candidate_parts(raw)) if p is not None]
    return ModelResponse(parts=parts, text=_aggregate_text(raw))


def interpret(raw: Any) -> GenerationOutcome:
    """Classify a response as an image, a text-only answer or nothing.

    The first inline image with a payload wins and later parts are ignored.
    Image parts with no bytes are skipped. Never raises on malformed input;
    that is reported as ``Empty``.
    """
    response = to_model_response(raw)
    logger.debug(f"Interpreting response with {len(response.parts)} parts")
    for part in response.parts:
        if isinstance(part, InlineImagePart) and part.data:
            return ImageProduced(encode_from_wire(part.data, part.mime_type))
    if response.text:
        return TextOnly(response.text)
    return Empty()
