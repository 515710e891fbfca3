# Utils for moving images between data URIs, wire bytes and local files
from __future__ import annotations

import asyncio
import base64
import binascii
import io
import mimetypes
from pathlib import Path

from loguru import logger
from PIL import Image, UnidentifiedImageError

from genstudio.utils.aliases import EncodedImage, MimeType
from genstudio.utils.constants import BASE64_MARKER, DATA_URI_SCHEME, DEFAULT_MIME_TYPE
from genstudio.utils.data_types import WireImage
from genstudio.utils.errors import FileReadError, MalformedImageError


def decode_for_wire(image: EncodedImage) -> WireImage:
    """Split a data URI into raw bytes and its declared MIME type.

    Args:
        image: ``data:<mime>;base64,<payload>`` string.
    Returns:
        WireImage with the decoded payload.
    Raises:
        MalformedImageError: When the prefix structure is missing or the
            payload is not valid base64.
    """
    if not isinstance(image, str) or not image.startswith(DATA_URI_SCHEME):
        raise MalformedImageError("Image is not a data URI")
    header, sep, payload = image.partition(",")
    if not sep or not header.endswith(BASE64_MARKER[:-1]):
        raise MalformedImageError("Data URI is missing the base64 marker")
    mime_type = header[len(DATA_URI_SCHEME) : -len(BASE64_MARKER[:-1])]
    if not mime_type:
        raise MalformedImageError("Data URI does not declare a MIME type")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedImageError(f"Invalid base64 payload: {exc}", mime_type=mime_type) from exc
    return WireImage(data=data, mime_type=mime_type)


def encode_from_wire(data: bytes, mime_type: MimeType | None = None) -> EncodedImage:
    """Wrap raw image bytes into a data URI."""
    b64 = base64.b64encode(data).decode("ascii")
    return f"{DATA_URI_SCHEME}{mime_type or DEFAULT_MIME_TYPE}{BASE64_MARKER}{b64}"


def detect_mime_type(data: bytes) -> MimeType:
    """Identify image bytes with Pillow and return the matching MIME type.

    Raises UnidentifiedImageError when Pillow does not recognise the bytes.
    """
    with Image.open(io.BytesIO(data)) as img:
        img.verify()
        fmt = img.format
    return Image.MIME.get(fmt or "", DEFAULT_MIME_TYPE)


def _read_image_file(path: Path, declared_type: MimeType | None) -> WireImage:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FileReadError(path, exc.strerror or str(exc)) from exc
    if not data:
        raise FileReadError(path, "file is empty")
    try:
        detected = detect_mime_type(data)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise FileReadError(path, "not a supported image") from exc

    mime_type = declared_type or detected
    return WireImage(data=data, mime_type=mime_type)


async def encode_from_local_file(path: str | Path, declared_type: MimeType | None = None) -> EncodedImage:
    """Read a local image file into a data URI without blocking the event loop.

    Args:
        path: File chosen by the user.
        declared_type: MIME type reported by the picker, if any.
    Returns:
        The encoded image.
    Raises:
        FileReadError: On I/O failure, empty files or non-image content.
    """
    path = Path(path)
    wire = await asyncio.to_thread(_read_image_file, path, declared_type)
    logger.debug(f"Read {len(wire.data)} bytes ({wire.mime_type}) from {path.name}")
    return encode_from_wire(wire.data, wire.mime_type)


def to_pil(image: EncodedImage) -> Image.Image:
    """Open an encoded image with Pillow (used for previews)."""
    wire = decode_for_wire(image)
    try:
        pil = Image.open(io.BytesIO(wire.data))
        pil.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise MalformedImageError(f"Payload is not a decodable image: {exc}", mime_type=wire.mime_type) from exc
    return pil


def extension_for(mime_type: MimeType) -> str:
    """File extension for a MIME type, ``.png`` when unknown."""
    ext = mimetypes.guess_extension(mime_type)
    if ext in (None, ".jpe"):
        ext = ".jpg" if mime_type == "image/jpeg" else ".png"
    return ext
