from dataclasses import dataclass
from typing import TypeAlias

# Self-describing image payload: "data:<mime>;base64,<payload>"
EncodedImage: TypeAlias = str

MimeType: TypeAlias = str


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class InlineImagePart:
    data: bytes
    mime_type: MimeType


# One unit of a model request or response
ContentPart: TypeAlias = TextPart | InlineImagePart

__all__ = [
    "ContentPart",
    "EncodedImage",
    "InlineImagePart",
    "MimeType",
    "TextPart",
]
