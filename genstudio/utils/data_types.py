from dataclasses import dataclass, field

from genstudio.utils.aliases import ContentPart, EncodedImage, MimeType
from genstudio.utils.constants import DEFAULT_PROMPT


@dataclass
class Session:
    """
    The single mutable UI aggregate, owned by ``StudioSession``.

    Attributes
    - prompt: Text currently in the prompt box.
    - current_image: The image on screen, always complete and decodable, or None.
    - busy: True while a generation/edit call is in flight.
    - last_error: User-visible message of the last failed operation.
    """

    prompt: str = DEFAULT_PROMPT
    current_image: EncodedImage | None = None
    busy: bool = False
    last_error: str | None = None


@dataclass(frozen=True)
class WireImage:
    """Raw image bytes plus MIME type, as the model API expects them."""

    data: bytes
    mime_type: MimeType


@dataclass(frozen=True)
class GenerationRequest:
    prompt_text: str
    source_image: EncodedImage | None = None

    @property
    def is_edit(self) -> bool:
        return self.source_image is not None


@dataclass(frozen=True)
class ModelResponse:
    """Provider-agnostic view of a model response."""

    parts: list[ContentPart] = field(default_factory=list)
    text: str | None = None


@dataclass(frozen=True)
class ImageProduced:
    image: EncodedImage


@dataclass(frozen=True)
class TextOnly:
    text: str


@dataclass(frozen=True)
class Empty:
    pass


GenerationOutcome = ImageProduced | TextOnly | Empty
