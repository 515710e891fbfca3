"""Turn the session's prompt and image into a model request."""

from collections.abc import Iterator

from genstudio.utils.aliases import ContentPart, InlineImagePart, TextPart
from genstudio.utils.data_types import GenerationRequest, Session
from genstudio.utils.images import decode_for_wire


def build_request(session: Session, edit_mode: bool) -> GenerationRequest:
    """Build a request from the current session.

    Edit mode attaches the current image as context. With no current image it
    falls back to plain generation. Callers guarantee a non-empty prompt.
    """
    source = session.current_image if edit_mode else None
    return GenerationRequest(prompt_text=session.prompt, source_image=source)


def _iter_content_parts(request: GenerationRequest) -> Iterator[ContentPart]:
    # Image context must precede the instruction text
    if request.source_image is not None:
        wire = decode_for_wire(request.source_image)
        yield InlineImagePart(data=wire.data, mime_type=wire.mime_type)
    yield TextPart(request.prompt_text)


def to_content_parts(request: GenerationRequest) -> list[ContentPart]:
    """Ordered provider-agnostic parts for a request."""
    return list(_iter_content_parts(request))
